"""StockMaster: warehouse stock ledger and operation lifecycle."""

__version__ = "1.0.0"
