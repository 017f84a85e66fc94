"""
FastAPI backend: REST API over one address book file.
Run with uvicorn: uvicorn api.main:app --reload
"""

import base64
import logging
import threading
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from contactbook.application import (
    ContactCardData,
    ContactNotFound,
    ContactService,
    ContactSummary,
    Duplicate,
    Invalid,
)
from contactbook.infrastructure import (
    FileAddressBookRepository,
    VCardError,
    ensure_directories,
    load_settings,
    phone_normalizer,
)
from contactbook.infrastructure import vcard
from contactbook.infrastructure.settings import (
    generate_address_book_path,
    generate_contact_picture_path,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = load_settings()
    ensure_directories(settings)
    repo = FileAddressBookRepository(settings.address_book_file, settings.retention_days)
    book = repo.load()
    app.state.settings = settings
    app.state.service = ContactService(
        book, repo, normalize_phone=phone_normalizer(settings.default_region)
    )
    # One lock for the whole aggregate; contacts, tag index and trash change together.
    app.state.lock = threading.Lock()
    logger.info("Address book file: %s", settings.address_book_file)
    try:
        yield
    finally:
        with app.state.lock:
            try:
                app.state.service.save()
            except OSError:
                logger.exception("Error saving address book on shutdown.")


app = FastAPI(title="Contactbook API", lifespan=lifespan)


def get_service(request: Request) -> ContactService:
    return request.app.state.service


# --- REST: health ---


@app.get("/health")
def health():
    return {"status": "ok"}


# --- REST: contacts ---


class ContactBody(BaseModel):
    given_name: str = ""
    family_name: str = ""
    phone_numbers: list[str] = Field(default_factory=list)
    emails: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    picture: str | None = None

    def to_card(self) -> ContactCardData:
        return ContactCardData(
            given_name=self.given_name,
            family_name=self.family_name,
            phone_numbers=tuple(self.phone_numbers),
            emails=tuple(self.emails),
            tags=tuple(self.tags),
            picture=self.picture,
        )


class UpdateContactBody(BaseModel):
    current: ContactBody
    updated: ContactBody


class TagBody(BaseModel):
    contact: ContactBody
    tag: str


class ImportBody(BaseModel):
    vcard: str


class PictureBody(BaseModel):
    extension: str
    data: str  # base64


class ContactListItem(BaseModel):
    given_name: str
    family_name: str
    full_name: str
    phone_numbers: list[str] = []
    emails: list[str] = []
    tags: list[str] = []
    picture: str | None = None


def _item(s: ContactSummary) -> ContactListItem:
    return ContactListItem(
        given_name=s.given_name,
        family_name=s.family_name,
        full_name=s.full_name,
        phone_numbers=list(s.phone_numbers),
        emails=list(s.emails),
        tags=list(s.tags),
        picture=s.picture,
    )


def _fail(result) -> None:
    """Raise the HTTP error for a non-success result."""
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    if isinstance(result, Duplicate):
        raise HTTPException(status_code=409, detail="Contact already exists")
    if isinstance(result, ContactNotFound):
        raise HTTPException(status_code=404, detail=f"Contact not found: {result.name}")


def _save(service: ContactService, checkpoint) -> None:
    """Persist the book. On a file error, put the checkpoint back so memory matches disk."""
    try:
        service.save()
    except OSError as e:
        logger.exception("Error saving address book. The change was rolled back.")
        service.rollback(checkpoint)
        raise HTTPException(
            status_code=503, detail="Address book could not be saved; the change was not applied"
        ) from e


def _mutate(request: Request, action):
    """Run action on the service under the lock; save and return the result on success."""
    service = get_service(request)
    with request.app.state.lock:
        checkpoint = service.checkpoint()
        result = action(service)
        _fail(result)
        _save(service, checkpoint)
    return result


@app.get("/contacts")
def list_contacts(request: Request, tag: str | None = None, q: str | None = None):
    service = get_service(request)
    with request.app.state.lock:
        if tag is not None:
            summaries = service.list_tagged(tag)
        elif q is not None:
            summaries = service.search_contacts(q)
        else:
            summaries = service.list_contacts()
    return [_item(s) for s in summaries]


@app.post("/contacts")
def create_contact(body: ContactBody, request: Request):
    result = _mutate(request, lambda s: s.add_contact(body.to_card()))
    return JSONResponse(content=_item(result.contact).model_dump(), status_code=201)


@app.put("/contacts")
def update_contact(body: UpdateContactBody, request: Request):
    result = _mutate(
        request, lambda s: s.update_contact(body.current.to_card(), body.updated.to_card())
    )
    return _item(result.contact)


@app.post("/contacts/delete")
def delete_contact(body: ContactBody, request: Request):
    result = _mutate(request, lambda s: s.delete_contact(body.to_card()))
    return _item(result.contact)


@app.post("/contacts/restore")
def restore_contact(body: ContactBody, request: Request):
    result = _mutate(request, lambda s: s.restore_contact(body.to_card()))
    return _item(result.contact)


@app.post("/contacts/tag")
def tag_contact(body: TagBody, request: Request):
    result = _mutate(request, lambda s: s.tag_contact(body.contact.to_card(), body.tag))
    return _item(result.contact)


@app.post("/contacts/untag")
def untag_contact(body: TagBody, request: Request):
    result = _mutate(request, lambda s: s.untag_contact(body.contact.to_card(), body.tag))
    return _item(result.contact)


# --- REST: tags and trash ---


@app.get("/tags")
def list_tags(request: Request):
    service = get_service(request)
    with request.app.state.lock:
        return service.list_tags()


@app.get("/trash")
def list_trash(request: Request):
    service = get_service(request)
    with request.app.state.lock:
        deleted = service.list_deleted()
    return [
        {"deleted_on": d.deleted_on.isoformat(), "contact": _item(d.contact).model_dump()}
        for d in deleted
    ]


@app.post("/trash/purge")
def purge_trash(request: Request):
    service = get_service(request)
    with request.app.state.lock:
        checkpoint = service.checkpoint()
        removed = service.purge_expired()
        _save(service, checkpoint)
    return {"removed": removed}


# --- vCard import/export ---


@app.get("/export.vcf")
def export_contacts(request: Request):
    service = get_service(request)
    with request.app.state.lock:
        content = vcard.dumps(service.book.contacts())
    return Response(content=content, media_type="text/vcard")


@app.post("/import")
def import_contacts(body: ImportBody, request: Request):
    try:
        contacts = vcard.loads(body.vcard)
    except VCardError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    service = get_service(request)
    with request.app.state.lock:
        checkpoint = service.checkpoint()
        report = service.import_contacts(contacts)
        _save(service, checkpoint)
    return {"added": report.added, "duplicates": report.duplicates}


# --- files: backups and pictures ---


@app.post("/backup")
def backup_address_book(request: Request):
    settings = request.app.state.settings
    service = get_service(request)
    path = generate_address_book_path(settings)
    with request.app.state.lock:
        try:
            FileAddressBookRepository(path, settings.retention_days).save(service.book)
        except OSError as e:
            logger.exception("Error writing backup to %s", path)
            raise HTTPException(status_code=503, detail="Backup could not be written") from e
    return JSONResponse(content={"path": str(path)}, status_code=201)


@app.post("/pictures")
def upload_picture(body: PictureBody, request: Request):
    """Store picture bytes; the returned path goes in a contact's picture field."""
    try:
        content = base64.b64decode(body.data, validate=True)
        path = generate_contact_picture_path(request.app.state.settings, body.extension)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if not content:
        raise HTTPException(status_code=400, detail="Picture data is empty")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    except OSError as e:
        logger.exception("Error writing picture to %s", path)
        raise HTTPException(status_code=503, detail="Picture could not be stored") from e
    logger.info("Stored picture at %s", path)
    return JSONResponse(content={"picture": str(path)}, status_code=201)
