"""Well-known artifact names written by the proxy checker.

Layout of an output directory::

    <output_dir>/proxies.json          structured results (array of objects)
    <output_dir>/proxies/all.txt       one proxy per line, every protocol
    <output_dir>/proxies/http.txt      ... and socks4.txt, socks5.txt
"""

from __future__ import annotations

from pathlib import Path

RESULTS_JSON = "proxies.json"
TEXT_DIR = "proxies"

# Selectors accepted by the per-protocol download endpoint
TEXT_PROTOCOLS: tuple[str, ...] = ("http", "socks4", "socks5", "all")


def json_path(output_dir: Path) -> Path:
    return output_dir / RESULTS_JSON


def text_path(output_dir: Path, protocol: str = "all") -> Path:
    """Path of the line-oriented artifact for *protocol* (``all`` by default)."""
    return output_dir / TEXT_DIR / f"{protocol}.txt"


def has_artifacts(output_dir: Path) -> bool:
    """True when *output_dir* holds evidence of a previous run."""
    return json_path(output_dir).is_file() or text_path(output_dir).is_file()
