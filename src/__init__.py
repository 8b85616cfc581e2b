"""RFI trainer source tree."""
