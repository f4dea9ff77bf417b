"""
WireDesk: wire transfer request letters.

Validates a submitted wire transfer, renders it as a bank-style PDF letter
and emails it to the treasury mailbox.
"""

__version__ = "1.0.0"
