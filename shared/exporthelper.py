import json
from typing import Dict, List, Optional

import pandas as pd
from fastapi.encoders import jsonable_encoder
from fastapi.responses import Response


def rows_to_csv(data: List[Dict], columns: Optional[List[str]] = None) -> str:
    """
    Render rows as CSV text.

    Values containing a comma, quote or newline are quoted and inner quotes
    doubled; missing values render as empty fields.

    Args:
        data: List of dictionaries (each dict = row)
        columns: Column order; defaults to the keys of the first row
    """
    if columns is None:
        columns = list(data[0].keys()) if data else []

    # object dtype keeps ints as ints when a column has gaps
    df = pd.DataFrame(jsonable_encoder(data), columns=columns, dtype=object)
    return df.to_csv(index=False, lineterminator="\n", na_rep="")


def csv_download(data: List[Dict], filename: str, columns: Optional[List[str]] = None) -> Response:
    return Response(
        content=rows_to_csv(data, columns),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def json_download(data: List[Dict], filename: str) -> Response:
    return Response(
        content=json.dumps(jsonable_encoder(data), indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
