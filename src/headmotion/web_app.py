import logging

from flask import Flask, jsonify, request

from headmotion.classifier import TorchActivityClassifier
from headmotion.config import LABEL_MAP_PATH, LOG_LEVEL, MODEL_PATH, PORT, WINDOW_SIZE
from headmotion.display import DisplayState, LabelDispatcher, format_confidence
from headmotion.pose import HeadPoseTracker
from headmotion.sensors import MotionSample
from headmotion.session import AuthorizationStatus, MotionSession
from headmotion.window import WindowAggregator

logger = logging.getLogger(__name__)


def create_app(session, display):
    """Backend-only Flask app around one motion session."""
    app = Flask(__name__)

    @app.errorhandler(ValueError)
    def bad_request(exc):
        return jsonify(error=str(exc)), 400

    @app.route("/")
    def index():
        return (
            "Backend is running. POST samples to /samples and read /prediction "
            "and /pose.",
            200,
        )

    @app.route("/samples", methods=["POST"])
    def samples():
        if not session.active:
            return jsonify(error="tracking is stopped"), 409

        payload = request.get_json(silent=True)
        if payload is None:
            raise ValueError("Expected a JSON sample or list of samples")
        if isinstance(payload, dict):
            payload = [payload]
        if not isinstance(payload, list):
            raise ValueError("Expected a JSON sample or list of samples")

        # Parse everything first so a bad entry does not leave a half-fed window.
        parsed = [MotionSample.from_dict(item) for item in payload]

        predictions, position = session.handle_samples(parsed)
        return jsonify(
            accepted=len(parsed),
            predictions=[
                {"label": p.label, "confidence": format_confidence(p.confidence)}
                for p in predictions
            ],
            position=position,
        )

    @app.route("/prediction")
    def prediction():
        return jsonify(display.snapshot())

    @app.route("/pose")
    def pose():
        return jsonify(pose=session.pose_tracker.pose.tolist())

    @app.route("/reference", methods=["POST"])
    def reference():
        if not session.recenter():
            return jsonify(error="no orientation received yet"), 409
        return jsonify(pose=session.pose_tracker.pose.tolist())

    @app.route("/start", methods=["POST"])
    def start():
        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            raise ValueError("Expected a JSON object")
        status = AuthorizationStatus(body.get("authorization", "authorized"))
        started = session.start(status)
        if not started:
            return jsonify(active=False, error="motion access denied"), 403
        return jsonify(active=session.active)

    @app.route("/stop", methods=["POST"])
    def stop():
        session.stop()
        return jsonify(active=session.active)

    return app


def main():
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    classifier = TorchActivityClassifier.from_files(MODEL_PATH, LABEL_MAP_PATH)
    display = DisplayState()
    dispatcher = LabelDispatcher(display)
    session = MotionSession(WindowAggregator(classifier, WINDOW_SIZE), HeadPoseTracker(), dispatcher)

    app = create_app(session, display)
    try:
        app.run(host="0.0.0.0", port=PORT, debug=False)
    finally:
        dispatcher.close()


if __name__ == "__main__":
    main()
