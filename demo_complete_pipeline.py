#!/usr/bin/env python3
"""
Complete Pipeline Demo: Schedule -> properties text -> Schedule

Shows the full workflow:
1. Build an example schedule
2. Marshal it to properties text
3. Unmarshal it back, whole and by key
4. Describe the shape and the keys it accepts
"""

from propcodec import marshal, unmarshal, unmarshal_key
from propcodec.examples import Interval, Schedule, build_example_schedule
from propcodec.serialization import key_patterns, shape_to_yaml


def main():
    print("=" * 80)
    print("COMPLETE PIPELINE DEMO: Schedule -> .properties -> Schedule")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Build and marshal
    # =========================================================================
    print("\n1. MARSHALLING...")
    schedule = build_example_schedule(weeks=2, recipient_count=3)
    text = marshal(schedule)
    for line in text.decode("utf-8").splitlines():
        print(f"   {line}")

    # =========================================================================
    # STEP 2: Unmarshal
    # =========================================================================
    print("\n2. UNMARSHALLING...")
    restored = unmarshal(text, Schedule)
    print(f"   ✓ Round trip equal: {restored == schedule}")
    print(f"   ✓ End of period: {restored.period.end_at}")

    interval = unmarshal_key("interval", text, Interval)
    print(f"   ✓ Interval only: {interval}")

    # =========================================================================
    # STEP 3: Shape
    # =========================================================================
    print("\n3. ACCEPTED KEYS:")
    print("-" * 80)
    for pattern in key_patterns(Schedule):
        print(f"   {pattern}")

    print("\n4. SHAPE (YAML):")
    print("-" * 80)
    for line in shape_to_yaml(Schedule).splitlines():
        print(f"   {line}")

    print("\n" + "=" * 80)
    print("PIPELINE COMPLETE!")
    print("=" * 80)


if __name__ == "__main__":
    main()
