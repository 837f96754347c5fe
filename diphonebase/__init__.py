"""Reading, phoneme renaming and ROM imaging of MBR diphone speech databases."""

__version__ = "0.1.0"
__all__ = [
    "binio",
    "database",
    "diphone_info",
    "hash_tab",
    "legacy",
    "loader",
    "rom",
    "zstring_list",
]