from __future__ import annotations

import csv
from io import StringIO
from typing import Dict, List


def _decode_tsv(raw: str) -> List[Dict[str, str]]:
    """Decode a TSV string that uses escaped tab characters."""
    stripped = raw.strip()
    decoded = stripped.replace("\\t", "\t").replace("\\n", "\n")
    reader = csv.DictReader(StringIO(decoded), delimiter="\t")
    rows: List[Dict[str, str]] = []
    for row in reader:
        cleaned = {key: value.strip() if isinstance(value, str) else value for key, value in row.items()}
        if any(cleaned.values()):
            rows.append(cleaned)
    return rows


FACILITY_DATA = _decode_tsv(
    """
Name\tLocation
PTARI Tropack Industrial\tGuayaquil
PTAR Santa Priscila\tTaura
"""
)


# Empty cells mean the check is not part of the equipment's plan.
EQUIPMENT_DATA = _decode_tsv(
    """
Facility\tCode\tDescription\tCategory\tLocation\tDaily\tMonthly\tQuarterly\tBiannual\tAnnual
PTARI Tropack Industrial\tDI01\tDIFUSORES TUBULARES MAGNUM 1000. REACTOR MBBR 1\tdifusores\tReactor MBBR 1\tControl visual de aireación\t\t\t\tControl de estado en general
PTARI Tropack Industrial\tDU01\tDUCTO DE DECANTACIÓN FORZADA\tductos\tDecantador Secundario\tInspección visual, posición\tControl de niveles del agua, suciedades, estado soportes\t\tControl de estado y ajustes\t
PTARI Tropack Industrial\tE01\tCUADRO ELECTRICO PTARI\tcuadro_electrico\tÁrea de Control\tInspección visual, temperaturas\tLimpieza interna y externa\tAjuste de elementos y controles en general\t\tControl de apriete de tornillos en borneras
PTARI Tropack Industrial\tLA01\tLAMELAS EN DECANTADOR SECUNDARIO\tlamelas\tDecantador Secundario\tInspección visual, posición\t\tControlar elementos de antiflotación\t\tControl de estado, limpieza general
PTARI Tropack Industrial\tM03\tSOPLANTES DE ÉMBOLOS ROTATIVOS MAPNER SEM.60\tmotores\tÁrea de Blowers\tControl de funcionamiento, presión, fugas\tControl de temperatura en descarga, nivel y color de aceite\tLimpieza general, filtro de aspiración, lubricación\tControl de tensión de banda, alineación de poleas\tCambio de aceite, limpieza de válvulas de retención
PTARI Tropack Industrial\tM04\tAGITADOR DE SUPERFICIE SCM MX VER 1.5\tmotores\tTanque de Lodos\tControl de funcionamiento, sonido\tControl de temperaturas y consumo\t\tCambio de aceite, limpieza, ajustes\tControl de estado en general
PTAR Santa Priscila\tS01\tSENSOR DE NIVEL TIPO RADAR FMR-20\tsensores\tTanque de Homogenización\tVerificación de lectura\t\t\t\tCalibración y control de estado
PTAR Santa Priscila\tV01\tVÁLVULA DE COMPUERTA DN150\tvalvulas\tCaseta de Bombeo\t\t\t\t\t
"""
)
