"""
Tests for perception adapters

Models are replaced with stand-ins exposing the same result shapes as
ultralytics and MediaPipe Face Mesh.
"""
import sys
from types import SimpleNamespace

import numpy as np
import pytest

from integrity_monitor.exceptions import PerceptionError
from integrity_monitor.monitors import horizontal_distance
from integrity_monitor.perception import FaceObservation, ObjectObservation, check_frame_ready
from integrity_monitor.perception import camera as camera_module
from integrity_monitor.perception.camera import OpenCVFrameSource
from integrity_monitor.perception.face_estimator import FaceKeypointEstimator
from integrity_monitor.perception.model_loader import check_models, get_face_mesh
from integrity_monitor.perception.object_detector import YoloObjectDetector, normalize_label
from integrity_monitor.perception.pipeline import ModelPerception

FRAME = np.full((100, 200, 3), 90, dtype=np.uint8)


def _yolo_model(detections):
    """Model whose predict() yields one result with the given (class_id, conf) boxes"""
    boxes = [SimpleNamespace(cls=[cls_id], conf=[conf]) for cls_id, conf in detections]
    return SimpleNamespace(
        names={0: "person", 67: "cell phone", 73: "book"},
        predict=lambda frame, conf, verbose: [SimpleNamespace(boxes=boxes)],
    )


def _face_mesh(faces):
    """Face Mesh stand-in; each face maps landmark index -> normalized x"""
    def landmarks(xs):
        points = [SimpleNamespace(x=0.0, y=0.5) for _ in range(468)]
        for index, x in xs.items():
            points[index] = SimpleNamespace(x=x, y=0.5)
        return points

    result = SimpleNamespace(
        multi_face_landmarks=[SimpleNamespace(landmark=landmarks(xs)) for xs in faces] or None
    )
    return SimpleNamespace(process=lambda rgb: result, close=lambda: None)


class TestNormalizeLabel:
    @pytest.mark.parametrize("label,expected", [
        ("cell phone", "cellPhone"),
        ("book", "book"),
        ("Cell phone", "cellPhone"),
        ("  ", ""),
    ])
    def test_labels(self, label, expected):
        assert normalize_label(label) == expected


class TestYoloObjectDetector:
    def test_reports_every_detection(self):
        detector = YoloObjectDetector(model=_yolo_model([(67, 0.91), (0, 0.88), (73, 0.3)]))

        assert detector.detect(FRAME) == [
            ObjectObservation("cellPhone", 0.91),
            ObjectObservation("person", 0.88),
            ObjectObservation("book", 0.3),
        ]

    def test_no_boxes(self):
        model = _yolo_model([])
        model.predict = lambda frame, conf, verbose: [SimpleNamespace(boxes=None)]

        assert YoloObjectDetector(model=model).detect(FRAME) == []

    def test_inference_error(self):
        def predict(frame, conf, verbose):
            raise RuntimeError("CUDA out of memory")

        model = _yolo_model([])
        model.predict = predict

        with pytest.raises(PerceptionError):
            YoloObjectDetector(model=model).detect(FRAME)


class TestFaceKeypointEstimator:
    def test_keypoints_in_pixels(self):
        mesh = _face_mesh([{1: 0.5, 362: 0.6, 263: 0.7, 133: 0.4, 33: 0.3}])
        faces = FaceKeypointEstimator(face_mesh=mesh).estimate(FRAME)

        assert len(faces) == 1
        face = faces[0]
        assert face.keypoint("noseTip").x == pytest.approx(100.0)
        assert face.keypoint("leftEye").x == pytest.approx(130.0)
        assert face.keypoint("rightEye").x == pytest.approx(70.0)
        assert face.keypoint("noseTip").y == pytest.approx(50.0)
        assert horizontal_distance(face) == pytest.approx(0.0)

    def test_turned_head(self):
        mesh = _face_mesh([{1: 0.75, 362: 0.6, 263: 0.6, 133: 0.4, 33: 0.4}])
        face = FaceKeypointEstimator(face_mesh=mesh).estimate(FRAME)[0]

        assert horizontal_distance(face) == pytest.approx(50.0)

    def test_no_faces(self):
        assert FaceKeypointEstimator(face_mesh=_face_mesh([])).estimate(FRAME) == []

    def test_several_faces(self):
        mesh = _face_mesh([{1: 0.2}, {1: 0.8}])
        assert len(FaceKeypointEstimator(face_mesh=mesh).estimate(FRAME)) == 2

    def test_close_releases_mesh(self):
        estimator = FaceKeypointEstimator(face_mesh=_face_mesh([]))
        estimator.close()
        assert estimator.face_mesh is None

    def test_closing_one_estimator_leaves_others_usable(self, monkeypatch):
        class FakeFaceMesh:
            def __init__(self, **kwargs):
                self.max_num_faces = kwargs["max_num_faces"]
                self.closed = False

            def process(self, rgb):
                assert not self.closed
                return SimpleNamespace(multi_face_landmarks=None)

            def close(self):
                self.closed = True

        fake_mediapipe = SimpleNamespace(solutions=SimpleNamespace(face_mesh=SimpleNamespace(FaceMesh=FakeFaceMesh)))
        monkeypatch.setitem(sys.modules, "mediapipe", fake_mediapipe)

        first = FaceKeypointEstimator(max_faces=2)
        first.estimate(FRAME)
        first_mesh = first.face_mesh
        first.close()

        second = FaceKeypointEstimator(max_faces=2)
        assert second.estimate(FRAME) == []
        assert second.face_mesh is not first_mesh
        assert first_mesh.closed and not second.face_mesh.closed
        assert get_face_mesh(2) is not get_face_mesh(2)


class TestFrameReady:
    def test_missing_frame(self):
        assert check_frame_ready(None)["issues"] == ["no_frame"]

    def test_dark_frame(self):
        result = check_frame_ready(np.zeros((10, 10, 3), dtype=np.uint8))
        assert result["is_ready"] is False
        assert result["issues"] == ["too_dark"]

    def test_normal_frame(self):
        result = check_frame_ready(FRAME)
        assert result["is_ready"] is True
        assert result["brightness"] == pytest.approx(90.0)

    def test_opaque_frame_handle(self):
        assert check_frame_ready("frame-17")["is_ready"] is True


class TestModelPerception:
    @pytest.mark.asyncio
    async def test_runs_models_off_loop(self):
        perception = ModelPerception(
            FaceKeypointEstimator(face_mesh=_face_mesh([{1: 0.5}])),
            YoloObjectDetector(model=_yolo_model([(73, 0.7)])),
        )

        faces = await perception.estimate_faces(FRAME)
        objects = await perception.detect_objects(FRAME)

        assert len(faces) == 1 and isinstance(faces[0], FaceObservation)
        assert objects == [ObjectObservation("book", 0.7)]
        perception.close()


class TestOpenCVFrameSource:
    @pytest.fixture
    def fake_capture(self, monkeypatch):
        class FakeCapture:
            opens = True
            instances = []

            def __init__(self, source):
                self.source = source
                self.frames = [(True, FRAME), (False, None)]
                self.released = False
                FakeCapture.instances.append(self)

            def set(self, prop, value):
                return True

            def isOpened(self):
                return FakeCapture.opens

            def read(self):
                return self.frames.pop(0)

            def release(self):
                self.released = True

        monkeypatch.setattr(camera_module.cv2, "VideoCapture", FakeCapture)
        return FakeCapture

    def test_reads_until_stream_ends(self, fake_capture):
        source = OpenCVFrameSource(0)

        assert source.read() is FRAME
        assert source.read() is None

        source.release()
        assert fake_capture.instances[0].released

    def test_device_not_opened(self, fake_capture):
        fake_capture.opens = False
        source = OpenCVFrameSource("rtsp://camera")

        assert source.read() is None
        assert source.read() is None
        assert len(fake_capture.instances) == 1
        assert len(fake_capture.instances[0].frames) == 2


def test_check_models_reports_backends():
    status = check_models()
    assert set(status) == {"ultralytics", "mediapipe", "yolo_weights"}
