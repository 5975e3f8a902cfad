"""Display formatting shared by the CLI and the desktop UI."""

import math


def format_bytes(num_bytes: int) -> str:
    """Human readable size using binary units, e.g. 17179869184 -> '16 GB'."""
    sizes = ["B", "KB", "MB", "GB", "TB"]
    if num_bytes <= 0:
        return "0 B"
    i = min(int(math.floor(math.log(num_bytes, 1024))), len(sizes) - 1)
    value = round(num_bytes / 1024**i, 2)
    return f"{value:g} {sizes[i]}"
