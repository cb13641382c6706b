"""
Gesture modules for the APDS-9960 driver.

This package contains:
- Gesture module with the sample batch, session state, processor and decoder
- Acquisition module with the FIFO polling state machine
"""
