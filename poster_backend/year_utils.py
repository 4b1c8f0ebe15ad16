"""
poster_backend/year_utils.py

Normalización del campo `Year` de OMDb.

OMDb devuelve el año de películas como "1999" y el de series como rango
"1999–2004" o "1999–" (serie aún en emisión). El gateway expone siempre un
string legible:

- "1999–2004" -> "1999–2004"
- "1999–"     -> "1999"
- "1999"      -> "1999"
- "" / None   -> ""

Módulo puro: sin logging ni dependencias.
"""

from __future__ import annotations

from typing import Final

# Separador de rangos de OMDb (en-dash U+2013, no guion ASCII)
YEAR_RANGE_SEP: Final[str] = "–"


def normalize_year(raw: str | None) -> str:
    if not raw:
        return ""

    if YEAR_RANGE_SEP not in raw:
        return raw

    # Solo cuentan los dos primeros tramos ("a–b–c" -> "a–b")
    parts = raw.split(YEAR_RANGE_SEP)
    start = parts[0].strip()
    end = parts[1].strip()
    return f"{start}{YEAR_RANGE_SEP}{end}" if end else start
