# scripts/check_datasets.py
"""
Ejecuta la suite de calidad sobre todos los datasets registrados y guarda
un informe por dataset más un resumen en logs/.
"""
from __future__ import annotations
import sys

import pandas as pd
import requests

from idi_canarias import config, loaders
from idi_canarias.logging_config import setup_logging
from idi_canarias.quality import run_quality_suite, save_quality_report


def run() -> int:
    summary = []
    for name, spec in config.DATASETS.items():
        try:
            records = loaders.load_records(name)
        except (FileNotFoundError, requests.HTTPError) as e:
            print(f"[!] {e}")
            summary.append({"dataset": name, "rows": 0, "quality_score": None, "error": str(e)})
            continue
        print(f"[+] Evaluando {name} ({len(records)} filas) …")
        rep = run_quality_suite(records, spec.schema)
        save_quality_report(rep, config.REPORTS_DIR, f"quality_{name}")
        summary.append({"dataset": name, "rows": len(records),
                        "quality_score": rep.attrs["quality_score"], "error": ""})

    df = pd.DataFrame(summary)
    out = save_quality_report(df, config.REPORTS_DIR, "quality_report")
    print(df.to_string(index=False))
    print(f"✅ Resumen: {out}")
    return 1 if df["quality_score"].isna().any() else 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(run())
