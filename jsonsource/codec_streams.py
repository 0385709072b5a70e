"""Open input files, decompressing by file extension."""
import bz2
import gzip
import logging
import lzma
import pathlib
from typing import BinaryIO, Callable, Dict, Union
from urllib.parse import unquote, urlparse

logger = logging.getLogger(__name__)

PathLike = Union[str, pathlib.Path]

_CODECS: Dict[str, Callable[[str], BinaryIO]] = {
    '.gz': lambda p: gzip.open(p, 'rb'),
    '.bz2': lambda p: bz2.open(p, 'rb'),
    '.xz': lambda p: lzma.open(p, 'rb'),
    '.lzma': lambda p: lzma.open(p, 'rb'),
}


def local_path(path: PathLike) -> str:
    """Accept plain paths and ``file://`` URIs."""
    text = str(path)
    if text.startswith('file:'):
        return unquote(urlparse(text).path)
    return text


def codec_for(path: PathLike):
    return _CODECS.get(pathlib.PurePath(local_path(path)).suffix.lower())


def is_splittable_codec(path: PathLike) -> bool:
    """Compressed files can only be decoded from their first byte."""
    return codec_for(path) is None


def open_stream(path: PathLike) -> BinaryIO:
    """Return a binary stream over the decoded content of ``path``."""
    local = local_path(path)
    codec = codec_for(local)
    try:
        if codec is None:
            return open(local, 'rb')
        logger.debug(f"opening {local} with decompression")
        return codec(local)
    except OSError as e:
        logger.error(f"open failed for {local}: {e}")
        raise


def read_text(path: PathLike, encoding: str = 'utf-8') -> str:
    """Whole decoded content of ``path`` as text, for corrupt-record capture."""
    with open_stream(path) as stream:
        return stream.read().decode(encoding, errors='replace')


def file_size(path: PathLike) -> int:
    return pathlib.Path(local_path(path)).stat().st_size
