"""
Run a monitoring session against a local camera.

    python -m integrity_monitor --candidate "Jane Doe" --duration 600 --submit
"""

import argparse
import asyncio
import json
import logging
from typing import Any, Dict, Optional

from .config import MonitorSettings, get_settings
from .exceptions import ReportTransportError
from .perception.port import FrameSource, PerceptionPort
from .reports import ReportClient
from .session import MonitorSession

logger = logging.getLogger("integrity_monitor")


async def run_monitor(
    frame_source: FrameSource,
    perception: PerceptionPort,
    duration: float,
    candidate_name: str = "",
    settings: Optional[MonitorSettings] = None,
    client: Optional[ReportClient] = None,
) -> Dict[str, Any]:
    """
    Sample the feed for `duration` seconds, then finalize the session.

    Returns:
        The session's final results, plus report_id when a client is given
    """
    session = MonitorSession(candidate_name=candidate_name, settings=settings)
    session.start(frame_source, perception)
    try:
        await asyncio.sleep(duration)
    finally:
        await session.stop()

    result = session.finalize()
    report = result.pop("report")

    if client is not None:
        try:
            result["report_id"] = await client.submit(report)
        except ReportTransportError as e:
            logger.error(f"Could not submit report: {e}")
            result["report_id"] = None

    return result


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Monitor a camera feed and produce an integrity report')
    parser.add_argument('--source', type=str, default='0', help='Camera index or video path/URL')
    parser.add_argument('--candidate', type=str, default='', help='Candidate name for the report')
    parser.add_argument('--duration', type=float, default=60.0, help='Seconds to monitor')
    parser.add_argument('--yolo-model', type=str, default=None, help='Path to YOLO weights (defaults to yolov8n)')
    parser.add_argument('--submit', action='store_true', help='Submit the report to the report store')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    )

    from .perception.camera import OpenCVFrameSource
    from .perception.pipeline import ModelPerception

    settings = get_settings()
    if args.yolo_model:
        settings = settings.model_copy(update={"YOLO_MODEL_PATH": args.yolo_model})

    source = int(args.source) if args.source.isdigit() else args.source
    camera = OpenCVFrameSource(source)
    perception = ModelPerception.from_settings(settings)
    client = ReportClient(settings=settings) if args.submit else None

    try:
        result = asyncio.run(run_monitor(camera, perception, args.duration, args.candidate, settings, client))
    finally:
        camera.release()
        perception.close()

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
