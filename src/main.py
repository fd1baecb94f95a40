# src/main.py
from __future__ import annotations

import argparse
import logging
from typing import Callable, List, Optional

import numpy as np

from config import Config, DetectorConfig, OverlayStyle
from detector import DetectionResult, detect_light
from metrics import Metrics, summary_lines, update_metrics
from roi import is_valid_frame
from scheduler import ManualDriver, RealtimeDriver, TickDriver
from tick_scope import TickScope
from video_io import FrameSource, WriterError, get_fps, make_writer, open_source
from vision import AcquisitionError, VisionHandle, init_vision
from visualize import Overlay

logger = logging.getLogger(__name__)

# Called once per analyzed tick with the frame, the fresh overlay and the result.
# Returning False asks the loop to stop.
FrameSink = Callable[[np.ndarray, Overlay, Optional[DetectionResult]], Optional[bool]]


class DetectionLoop:
    """
    One pipeline pass per driver tick, single-threaded.

    Across ticks it keeps only the vision handle, the source and the last
    reported color; everything else lives in a per-tick TickScope.
    """

    def __init__(
        self,
        vision: VisionHandle,
        source: FrameSource,
        driver: TickDriver,
        cfg: Optional[DetectorConfig] = None,
        style: Optional[OverlayStyle] = None,
        sink: Optional[FrameSink] = None,
        metrics: Optional[Metrics] = None,
    ) -> None:
        self.vision = vision
        self.source = source
        self.driver = driver
        self.cfg = cfg or DetectorConfig()
        self.sink = sink
        self.metrics = metrics or Metrics()
        self.overlay = Overlay(vision, style=style)

        self.last_result: Optional[DetectionResult] = None
        self.last_color_hex: Optional[str] = None
        self.last_scope: Optional[TickScope] = None
        self.running = False
        self._token: Optional[int] = None

    def start(self) -> None:
        if self.running:
            return
        self.running = True
        self._schedule()

    def stop(self) -> None:
        self.running = False
        if self._token is not None:
            self.driver.cancel(self._token)
            self._token = None
        self.source.release()

    def _schedule(self) -> None:
        self._token = self.driver.request(self._tick)

    def _tick(self) -> None:
        self._token = None
        if not self.running:
            return
        self.metrics.ticks += 1
        try:
            self._process()
        except Exception:
            logger.exception("Tick %d failed", self.metrics.ticks)
            self.metrics.errors += 1
            self.overlay.clear()
            self.last_result = None
        finally:
            if self.running:
                self._schedule()

    def _process(self) -> None:
        frame = self.source.read() if self.source.ready else None
        if not is_valid_frame(frame):
            # no analysis, but no stale ring either
            self.metrics.not_ready += 1
            self.overlay.clear()
            self.last_result = None
            if getattr(self.source, "exhausted", False):
                self.stop()
            return

        h, w = frame.shape[:2]
        if self.overlay.resize(w, h):
            logger.debug("Overlay resized to %dx%d", w, h)

        with TickScope() as scope:
            self.last_scope = scope
            scope.hold(frame)
            result = detect_light(self.vision, frame, self.cfg, self.source.order, scope)
            self.overlay.draw(result)
            self.last_result = result
            if result is not None:
                self.last_color_hex = result.hex
            update_metrics(self.metrics, result)

            if self.sink is not None and self.sink(frame, self.overlay, result) is False:
                self.stop()


class DisplaySink:
    """Composites the overlay, optionally shows it and writes it to a video file."""

    def __init__(self, vision: VisionHandle, show: bool, writer=None) -> None:
        self.vision = vision
        self.show = show
        self.writer = writer

    def __call__(self, frame: np.ndarray, overlay: Overlay, result: Optional[DetectionResult]) -> bool:
        cv = self.vision.cv
        out = overlay.composite(frame)
        if self.writer is not None:
            self.writer.write(out)
        if self.show:
            cv.imshow("light detector", out)
            if (cv.waitKey(1) & 0xFF) == ord("q"):
                return False
        return True

    def close(self) -> None:
        if self.writer is not None:
            self.writer.release()
        if self.show:
            self.vision.cv.destroyAllWindows()


def run(cfg: Config) -> int:
    try:
        vision = init_vision(cfg.detector)
        source = open_source(cfg.source, cfg.frame_width, cfg.frame_height)
    except AcquisitionError as exc:
        logger.error("Cannot start: %s", exc)
        return 1

    writer = None
    if cfg.output_path:
        try:
            writer = make_writer(cfg.output_path, get_fps(source.cap, cfg.fps_assumed), source.size)
        except WriterError as exc:
            logger.error("Cannot start: %s", exc)
            source.release()
            return 1

    # Files are drained as fast as the pipeline allows; cameras are paced.
    driver = RealtimeDriver(cfg.refresh_hz) if source.live else ManualDriver()
    sink = DisplaySink(vision, cfg.show, writer)
    loop = DetectionLoop(vision, source, driver, cfg.detector, cfg.style, sink=sink)

    loop.start()
    try:
        driver.run()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        loop.stop()
        sink.close()

    for line in summary_lines(loop.metrics):
        print(line)
    if loop.last_color_hex:
        print("Last color:", loop.last_color_hex)
    return 0


def parse_args(argv: Optional[List[str]] = None) -> Config:
    p = argparse.ArgumentParser(description="Detect the brightest colored light in the lower third of a video.")
    p.add_argument("source", nargs="?", default="0", help="camera index or video file (default: 0)")
    p.add_argument("-o", "--output", default=None, help="write annotated video here (.mp4)")
    p.add_argument("--no-show", action="store_true", help="do not open a preview window")
    p.add_argument("--refresh-hz", type=float, default=60.0, help="tick rate for live cameras")
    p.add_argument("-v", "--verbose", action="store_true")
    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return Config(
        source=args.source,
        output_path=args.output,
        show=not args.no_show,
        refresh_hz=args.refresh_hz,
    )


def main(argv: Optional[List[str]] = None) -> int:
    return run(parse_args(argv))


if __name__ == "__main__":
    raise SystemExit(main())
