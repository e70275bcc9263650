# scripts/download_datasets.py
"""
Descarga los CSV publicados (Eurostat / INE / OEPM) desde IDI_DATA_BASE_URL
y los guarda en IDI_DATA_DIR con la misma ruta relativa.
"""
from __future__ import annotations
import sys

import requests

from idi_canarias import config, loaders
from idi_canarias.logging_config import setup_logging


def run() -> int:
    if not config.DATA_BASE_URL:
        print("[!] Define IDI_DATA_BASE_URL con la URL base de los CSV publicados.")
        return 1
    errors = 0
    # varios datasets comparten fichero: se descarga cada ruta una vez
    for path in sorted({d.path for d in config.DATASETS.values()}):
        print(f"Descargando {path}...")
        try:
            content = loaders.fetch_bytes(path)
        except requests.HTTPError as e:
            print(f"  [!] {e}")
            errors += 1
            continue
        out = config.DATA_DIR / path
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(content)
        print(f"  → Guardado: {out} ({len(content):,} bytes, versión {loaders.dataset_version(content)})")
    return 1 if errors else 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(run())
