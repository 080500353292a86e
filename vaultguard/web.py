from flask import Flask, jsonify, request

from vaultguard.auditor import age_report, audit
from vaultguard.errors import InvalidPolicy, ValidationError
from vaultguard.generator import CharClass, DEFAULT_LENGTH, generate, length_hint
from vaultguard.models import record_from_dict
from vaultguard.score import score_password


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def create_app():
    app = Flask(__name__)

    @app.errorhandler(InvalidPolicy)
    @app.errorhandler(ValidationError)
    def bad_request(e):
        return jsonify({"error": str(e)}), 400

    @app.route('/')
    def home():
        return jsonify({"message": "VaultGuard API is running"})

    @app.route('/generate', methods=['POST'])
    def generate_route():
        data = _json_body()
        length = data.get('length', DEFAULT_LENGTH)
        classes = [c for c in CharClass if data.get(c.value, True)]
        password = generate(length, classes)
        return jsonify({'password': password, 'hint': length_hint(len(password))})

    @app.route('/score', methods=['POST'])
    def score_route():
        data = _json_body()
        password = data.get('password', '')
        if not isinstance(password, str):
            raise ValidationError("password must be a string")
        result = score_password(password)
        # never echo the plaintext back
        result.pop('password', None)
        return jsonify(result)

    @app.route('/audit', methods=['POST'])
    def audit_route():
        data = _json_body()
        raw = data.get("records", [])
        if not isinstance(raw, list) or not all(isinstance(d, dict) for d in raw):
            raise ValidationError("records must be a list of objects")
        try:
            records = [record_from_dict(d) for d in raw]
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid record: {e}") from e
        snapshot = audit(records)
        result = snapshot.to_dict()
        result['ageReport'] = age_report(records)
        return jsonify(result)

    return app


app = create_app()

if __name__ == "__main__":
    app.run(debug=True)
