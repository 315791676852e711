"""Control logic for a two-channel fertilizer dispenser: ADC scaling, PI motor control, a text command protocol and stored settings."""

__version__ = "0.1.0"