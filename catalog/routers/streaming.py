# catalog/routers/streaming.py
from __future__ import annotations

from typing import Iterator, Sequence

from fastapi.responses import StreamingResponse
from pydantic import BaseModel

NDJSON_MEDIA_TYPE = "application/x-ndjson"


def _ndjson_lines(items: Sequence[BaseModel]) -> Iterator[bytes]:
    for item in items:
        yield item.model_dump_json().encode("utf-8") + b"\n"


def ndjson_response(items: Sequence[BaseModel]) -> StreamingResponse:
    """
    Răspuns stream NDJSON (un obiect JSON pe linie).
    `items` trebuie să fie deja materializat: lock-ul colecției nu se ține în timpul livrării.
    """
    return StreamingResponse(
        _ndjson_lines(items),
        media_type=NDJSON_MEDIA_TYPE,
        headers={"X-Total-Count": str(len(items))},
    )
