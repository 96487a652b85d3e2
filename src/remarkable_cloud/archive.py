from __future__ import annotations

import io
import zipfile
from typing import Mapping, Union

Entry = Union[bytes, str]


def build(entries: Mapping[str, Entry]) -> bytes:
    """Pack ``entries`` (filename -> bytes or text) into one zip buffer."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            zf.writestr(name, data.encode("utf-8") if isinstance(data, str) else bytes(data))
    return buf.getvalue()
