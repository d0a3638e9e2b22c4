"""SheetSync - a shared spreadsheet store with REST, form and reactive clients."""

__version__ = "0.1.0"
