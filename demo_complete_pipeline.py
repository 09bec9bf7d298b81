#!/usr/bin/env python3
"""
Complete Pipeline Demo: JSON → every format → JSON

Shows the full workflow:
1. Render the sample record in every output format
2. Read each rendering back and compare with the sample
3. Apply key case and replacement directives
4. Show what auto-detection makes of each rendering
"""

import json

from cdim import ConversionError, convert
from cdim.detection import detect_format
from cdim.examples import SAMPLE_JSON, sample_inputs
from cdim.settings import Format


def main():
    print("=" * 80)
    print("COMPLETE PIPELINE DEMO: JSON → YAML / XML / CSV / Emmet → JSON")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Render the sample
    # =========================================================================
    print("\n1. RENDERING SAMPLE RECORD...")
    rendered = sample_inputs()
    for fmt, text in sorted(rendered.items(), key=lambda item: item[0].value):
        print(f"\n   [{fmt.value}]")
        for line in text.splitlines():
            print(f"   {line}")

    # =========================================================================
    # STEP 2: Read every rendering back
    # =========================================================================
    print("\n2. READING BACK...")
    expected = json.loads(SAMPLE_JSON)
    for fmt, text in sorted(rendered.items(), key=lambda item: item[0].value):
        outcome = convert(text, f"inputformat={fmt.value}\noutputformat=json")
        back = json.loads(outcome.result)
        if fmt is Format.XML:
            back = back["root"]
        status = "✓" if back == expected else "✗"
        print(f"   {status} {fmt.value} → json")

    # =========================================================================
    # STEP 3: Directives
    # =========================================================================
    print("\n3. APPLYING DIRECTIVES...")
    directives = "\n".join([
        "inputformat=json",
        "outputformat=json",
        "align=false",
        "case=upper",
        "replace.tag.ADDRESS=HOME",
        "replace.val.30=thirty",
    ])
    print(f"   {convert(SAMPLE_JSON, directives).result}")

    # =========================================================================
    # STEP 4: Detection
    # =========================================================================
    print("\n4. AUTO-DETECTION:")
    print("-" * 80)
    for fmt, text in sorted(rendered.items(), key=lambda item: item[0].value):
        print(f"   {fmt.value:6} → {detect_format(text).value}")

    try:
        convert("   ", "inputformat=auto")
    except ConversionError as e:
        print(f"   blank  → {type(e).__name__}: {e}")

    print("\n" + "=" * 80)
    print("PIPELINE COMPLETE!")
    print("=" * 80)


if __name__ == "__main__":
    main()
