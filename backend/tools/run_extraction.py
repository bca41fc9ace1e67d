from __future__ import annotations

import argparse
import json
import logging
import os
from glob import glob
from typing import List, Optional, Tuple

from transfer_ocr.config import RecognizerSettings
from transfer_ocr.ocr.labels import is_valid_bank
from transfer_ocr.ocr.ocr_engine import Recognizer
from transfer_ocr.persistence.mappings import InMemoryAccountMappings, JsonAccountMappings
from transfer_ocr.services.pipeline import extract_receipt

EXTS = ("*.jpg", "*.jpeg", "*.png", "*.bmp", "*.webp")


def collect_images(root: str, default_bank: Optional[str]) -> List[Tuple[str, str]]:
    """(bank, path) pairs. Sub-folders named after a bank set the bank for their images."""
    candidates: List[Tuple[str, str]] = []
    subdirs = [d for d in glob(os.path.join(root, "*")) if os.path.isdir(d)]
    for sd in subdirs:
        bank = os.path.basename(sd).upper()
        if not is_valid_bank(bank) and not default_bank:
            continue
        for ext in EXTS:
            candidates.extend((bank if is_valid_bank(bank) else default_bank, p) for p in glob(os.path.join(sd, ext)))
    if default_bank:
        for ext in EXTS:
            candidates.extend((default_bank, p) for p in glob(os.path.join(root, ext)))
    return sorted(candidates, key=lambda c: c[1])


def main() -> int:
    ap = argparse.ArgumentParser(description="Extract transfer receipt records from a folder of images")
    ap.add_argument("root", help="Folder with images; bank-named sub-folders (BCA/, SEABANK/, ...) are supported")
    ap.add_argument("--bank", default=None, help="Bank format for images outside bank sub-folders")
    ap.add_argument("--paper-size", default="80mm", choices=["58mm", "80mm"])
    ap.add_argument("--out", default=os.path.join("backend", "reports", "extraction"))
    ap.add_argument("--engine", default=None, help="Recognizer engine (tesseract | paddle)")
    ap.add_argument("--mappings", default=None, help="JSON file with name -> masked account mappings")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    if not os.path.isdir(args.root):
        raise SystemExit(f"Root path is not a directory: {args.root}")

    default_bank = args.bank.upper() if args.bank else None
    candidates = collect_images(args.root, default_bank)
    if not candidates:
        print(f"No images found under {args.root}")
        return 1

    settings = RecognizerSettings()
    if args.engine:
        settings.engine = args.engine
    recognizer = Recognizer(settings)
    mappings = JsonAccountMappings(args.mappings) if args.mappings else InMemoryAccountMappings()

    os.makedirs(args.out, exist_ok=True)
    failures = 0
    for bank, path in candidates:
        result = extract_receipt(path, bank, args.paper_size, recognizer=recognizer, mappings=mappings)
        payload = {
            "file": path,
            "ok": result.ok,
            "reason": result.reason,
            "record": result.record.model_dump(by_alias=True),
            "meta": {k: v for k, v in result.meta.items() if k != "preflight"},
        }
        bank_dir = os.path.join(args.out, bank)
        os.makedirs(bank_dir, exist_ok=True)
        base = os.path.splitext(os.path.basename(path))[0]
        out_path = os.path.join(bank_dir, f"{base}.json")
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        if not result.ok:
            failures += 1
        print(f"{'OK ' if result.ok else 'DEG'} {path} -> {out_path}")

    print(f"Processed {len(candidates)} image(s), {failures} degraded")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
