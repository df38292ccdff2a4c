"""
Rust sysroot detector for rustdoc-man.

The standard library documentation shipped with a toolchain lives below the
sysroot reported by ``rustc --print sysroot``. Distribution packages install
it below ``/usr`` instead.
"""

import logging
import subprocess
from functools import lru_cache
from pathlib import Path

from . import config

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def detect_sysroot() -> Path:
    """
    Detect the sysroot of the active Rust toolchain.

    Returns:
        The sysroot, or the fallback sysroot if rustc is not available
    """
    try:
        result = subprocess.run(
            ["rustc", "--print", "sysroot"],
            check=False,
            capture_output=True,
            text=True,
            timeout=config.SYSROOT_TIMEOUT,
        )
    except (subprocess.SubprocessError, FileNotFoundError) as e:
        logger.debug(f"Cannot run rustc: {e}")
        return config.FALLBACK_SYSROOT

    sysroot = result.stdout.strip()
    if result.returncode != 0 or not sysroot:
        logger.debug(f"rustc --print sysroot failed: {result.stderr.strip()}")
        return config.FALLBACK_SYSROOT

    logger.info(f"Found Rust sysroot: {sysroot}")
    return Path(sysroot)


def sysroot_doc_dirs(sysroot: Path | None = None) -> list[Path]:
    """
    List the HTML documentation directories below a sysroot.

    Args:
        sysroot: Sysroot to use (default: detected sysroot)

    Returns:
        Candidate directories, whether or not they exist
    """
    sysroot = sysroot if sysroot is not None else detect_sysroot()
    return [sysroot / doc_dir for doc_dir in config.SYSROOT_DOC_DIRS]
