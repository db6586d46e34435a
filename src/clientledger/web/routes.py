"""HTTP API routes."""

from typing import Any, Optional

from flask import Blueprint, Response, jsonify, request

from clientledger.domain.aggregation import AggregationService
from clientledger.domain.category import CategoryService
from clientledger.domain.client import EDITABLE_FIELDS, ClientService
from clientledger.domain.entities import UploadedFile
from clientledger.domain.errors import ValidationError
from clientledger.domain.export import transactions_csv_text
from clientledger.domain.transaction import TransactionService, parse_sort_mode
from clientledger.domain.upload import DEFAULT_DOWNLOAD_TTL, UploadService
from clientledger.domain.webhook import SIGNATURE_HEADER, WebhookService, WebhookVerifier
from clientledger.web.context import app_services, current_accountant_id
from clientledger.web.serializers import (
    category_json,
    client_json,
    file_json,
    report_json,
    transaction_json,
)

api = Blueprint("api", __name__, url_prefix="/api")


def _json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Expected a JSON object")
    return body


def _int_field(value: Any, field: str, required: bool = True) -> Optional[int]:
    if value is None and not required:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{field} must be an integer") from e


def _upload_service() -> UploadService:
    services = app_services()
    return UploadService(
        services.db,
        services.storage,
        services.notifier,
        download_ttl=services.settings.download_url_ttl,
    )


def _pending_edits(body: dict) -> dict[int, Optional[int]]:
    edits = body.get("edits") or {}
    if not isinstance(edits, dict):
        raise ValidationError("edits must be an object of transaction ID to category ID")
    return {
        _int_field(tx_id, "transaction id"): _int_field(category_id, "category id", required=False)
        for tx_id, category_id in edits.items()
    }


@api.post("/transactions/webhook")
def transactions_webhook():
    services = app_services()
    verifier = WebhookVerifier(services.settings.webhook_secret)
    result = WebhookService(services.db, verifier).ingest(
        request.get_data(), request.headers.get(SIGNATURE_HEADER)
    )
    return jsonify(result.to_dict())


@api.post("/storage/signed-upload")
def signed_upload():
    current_accountant_id()
    body = _json_body()
    slot = _upload_service().request_upload_slot(body.get("clientId"), body.get("filename"))
    return jsonify({"bucket": slot.bucket, "path": slot.path, "token": slot.token})


@api.post("/storage/sign-download")
def sign_download():
    current_accountant_id()
    body = _json_body()
    expires_in = _int_field(body.get("expiresIn", DEFAULT_DOWNLOAD_TTL), "expiresIn")
    signed_url = _upload_service().sign_download(body.get("path"), expires_in)
    return jsonify({"signedUrl": signed_url})


@api.post("/files")
def finalize_upload():
    accountant_id = current_accountant_id()
    body = _json_body()
    client_id = _int_field(body.get("clientId"), "clientId")
    size = _int_field(body.get("size"), "size", required=False)
    file = _upload_service().finalize_upload(
        accountant_id,
        client_id,
        UploadedFile(name=body.get("name") or "", size=size),
        body.get("path") or "",
    )
    return jsonify(file_json(file)), 201


@api.get("/clients")
def list_clients():
    clients = ClientService(app_services().db).list_clients(current_accountant_id())
    return jsonify([client_json(c) for c in clients])


@api.post("/clients")
def create_client():
    accountant_id = current_accountant_id()
    body = _json_body()
    client = ClientService(app_services().db).create_client(
        accountant_id,
        first_name=body.get("first_name") or "",
        email=body.get("email") or "",
        last_name=body.get("last_name"),
        phone_number=body.get("phone_number"),
    )
    return jsonify(client_json(client)), 201


@api.get("/clients/<int:client_id>")
def get_client(client_id: int):
    client = ClientService(app_services().db).get_client(current_accountant_id(), client_id)
    return jsonify(client_json(client))


@api.patch("/clients/<int:client_id>")
def update_client(client_id: int):
    accountant_id = current_accountant_id()
    body = _json_body()
    unknown = sorted(set(body) - set(EDITABLE_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown client field(s): {', '.join(unknown)}")
    client = ClientService(app_services().db).update_client(accountant_id, client_id, **body)
    return jsonify(client_json(client))


@api.get("/clients/<int:client_id>/files")
def list_files(client_id: int):
    files = ClientService(app_services().db).list_files(current_accountant_id(), client_id)
    return jsonify([file_json(f) for f in files])


@api.get("/clients/<int:client_id>/summary")
def client_summary(client_id: int):
    report = AggregationService(app_services().db).client_report(current_accountant_id(), client_id)
    return jsonify(report_json(report))


@api.get("/clients/<int:client_id>/files/<int:file_id>/transactions")
def list_transactions(client_id: int, file_id: int):
    accountant_id = current_accountant_id()
    sort = parse_sort_mode(request.args.get("sort"))
    ClientService(app_services().db).get_file(accountant_id, client_id, file_id)
    transactions = TransactionService(app_services().db).list_by_file(
        accountant_id, client_id, file_id, sort
    )
    return jsonify([transaction_json(t) for t in transactions])


@api.patch("/clients/<int:client_id>/files/<int:file_id>/transactions")
def update_transaction_categories(client_id: int, file_id: int):
    """Save category overrides; unchanged choices are skipped."""
    accountant_id = current_accountant_id()
    body = _json_body()
    raw_patches = body.get("patches")
    if not isinstance(raw_patches, list):
        raise ValidationError("Expected a 'patches' array")

    edits: dict[int, Optional[int]] = {}
    feedback: dict[int, str] = {}
    for raw in raw_patches:
        if not isinstance(raw, dict):
            raise ValidationError("Each patch must be an object")
        tx_id = _int_field(raw.get("id"), "id")
        edits[tx_id] = _int_field(raw.get("updated_category_id"), "updated_category_id", required=False)
        if raw.get("feedback"):
            feedback[tx_id] = str(raw["feedback"])

    service = TransactionService(app_services().db)
    current = service.list_by_file(accountant_id, client_id, file_id)
    patches = service.pending_patches(current, edits, accountant_id, feedback)
    updated = service.apply_overrides(accountant_id, client_id, file_id, patches)
    return jsonify({"ok": True, "updated": updated, "skipped": len(edits) - len(patches)})


@api.get("/clients/<int:client_id>/files/<int:file_id>/summary")
def file_summary(client_id: int, file_id: int):
    report = AggregationService(app_services().db).file_report(
        current_accountant_id(), client_id, file_id
    )
    return jsonify(report_json(report))


@api.post("/clients/<int:client_id>/files/<int:file_id>/summary")
def preview_file_summary(client_id: int, file_id: int):
    """Report with unsaved category choices applied."""
    accountant_id = current_accountant_id()
    edits = _pending_edits(_json_body())
    report = AggregationService(app_services().db).file_report(
        accountant_id, client_id, file_id, pending_edits=edits
    )
    return jsonify(report_json(report))


@api.get("/clients/<int:client_id>/files/<int:file_id>/export")
def export_transactions(client_id: int, file_id: int):
    accountant_id = current_accountant_id()
    db = app_services().db
    file = ClientService(db).get_file(accountant_id, client_id, file_id)
    transactions = TransactionService(db).list_by_file(
        accountant_id, client_id, file_id, request.args.get("sort")
    )
    filename = f"{file.name.rsplit('.', 1)[0] or 'transactions'}_transactions.csv"
    return Response(
        transactions_csv_text(transactions),
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@api.get("/categories")
def list_categories():
    current_accountant_id()
    categories = CategoryService(app_services().db).list_categories()
    return jsonify([category_json(c) for c in categories])


@api.post("/categories")
def create_category():
    current_accountant_id()
    body = _json_body()
    category = CategoryService(app_services().db).create_category(body.get("name") or "")
    return jsonify(category_json(category)), 201
