#!/usr/bin/env python3
"""
MapShot
Screenshots the map area of each configured target into PNG files
"""

import asyncio
import logging
import sys

from mapshot import CaptureBuilder, CapturePlan, ConfigError

logger = logging.getLogger('mapshot')


async def main(plan: CapturePlan):
    """Capture every target of the plan"""
    capturer = CaptureBuilder.from_plan(plan).with_logging().build()
    results = await capturer.run()

    print("\nCapture Summary:")
    for result in results:
        print(f"  {result.target}: {result.path} ({result.byte_length} bytes, "
              f"{result.width}x{result.height}, {result.region_kind}, "
              f"{result.attempts} attempt(s))")
    return results


def run():
    """Console entry point; exit code 0 only if every target was written"""
    try:
        plan = CapturePlan.from_env()
    except ConfigError as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    print("🗺️ MapShot starting...")
    try:
        asyncio.run(main(plan))
    except KeyboardInterrupt:
        print("\n🛑 Capture stopped by user", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        logger.error(f"Capture failed: {e}")
        print(f"❌ [shot] failed: {e}", file=sys.stderr)
        sys.exit(1)
    print("✅ Capture completed!")


if __name__ == "__main__":
    run()
