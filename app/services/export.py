"""CSV / Excel rendering of attendance report rows."""
import io
from typing import Iterable

import pandas as pd

from app.models.attendance import STATUS_LABELS
from app.models.snapshot import EnrichedAttendanceRecord

EXPORT_COLUMNS = [
    "Fecha",
    "Matrícula",
    "Estudiante",
    "Grupo",
    "Carrera",
    "Docente",
    "Estado",
]


def records_frame(rows: Iterable[EnrichedAttendanceRecord]) -> pd.DataFrame:
    data = [
        {
            "Fecha": r.date,
            "Matrícula": r.student_number,
            "Estudiante": r.student_name,
            "Grupo": r.group_name,
            "Carrera": r.program_name,
            "Docente": r.teacher_name,
            "Estado": STATUS_LABELS[r.status],
        }
        for r in rows
    ]
    return pd.DataFrame(data, columns=EXPORT_COLUMNS)


def to_csv(df: pd.DataFrame) -> str:
    stream = io.StringIO()
    df.to_csv(stream, index=False)
    return stream.getvalue()


def to_excel(df: pd.DataFrame) -> io.BytesIO:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Asistencia")
    output.seek(0)
    return output
