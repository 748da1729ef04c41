"""Tracked document CRUD endpoints."""

from fastapi import APIRouter, HTTPException, Response, status
from sqlmodel import select

from docwatch.api.deps import CurrentIdentity, SessionDep
from docwatch.models import Document
from docwatch.models.document import DocumentCreate, DocumentRead, DocumentUpdate
from docwatch.services.expiration import classify, describe, today_utc
from docwatch.services.workspaces import workspace_exists

router = APIRouter()


def to_read(document: Document) -> DocumentRead:
    """Serialize a document with its current expiration status."""
    today = today_utc()
    return DocumentRead(
        id=document.id,
        name=document.name,
        description=document.description,
        expiration_date=document.expiration_date,
        workspace_id=document.workspace_id,
        created_by=document.created_by,
        created_at=document.created_at,
        status=classify(document.expiration_date, today),
        status_label=describe(document.expiration_date, today),
    )


async def get_document_or_404(document_id: str, session: SessionDep) -> Document:
    document = await session.get(Document, document_id)
    if not document:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found",
        )
    return document


async def require_workspace(workspace_id: str, session: SessionDep) -> None:
    if not await workspace_exists(session, workspace_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Selected workspace does not exist",
        )


@router.get("", response_model=list[DocumentRead])
async def list_documents(
    session: SessionDep,
    _identity: CurrentIdentity,
    workspace_id: str | None = None,
):
    """List documents soonest-expiring first, optionally within one workspace."""
    stmt = select(Document)
    if workspace_id and workspace_id.strip():
        stmt = stmt.where(Document.workspace_id == workspace_id.strip())
    stmt = stmt.order_by(Document.expiration_date, Document.created_at)  # type: ignore[arg-type]

    result = await session.execute(stmt)
    return [to_read(document) for document in result.scalars()]


@router.post("", response_model=DocumentRead, status_code=status.HTTP_201_CREATED)
async def create_document(
    document_in: DocumentCreate,
    session: SessionDep,
    identity: CurrentIdentity,
):
    """Start tracking a document."""
    name = document_in.name.strip()
    description = document_in.description.strip()
    if not name or not description or not document_in.workspace_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="name, description, workspace_id, and a valid expiration_date are required",
        )

    await require_workspace(document_in.workspace_id, session)

    document = Document(
        name=name,
        description=description,
        expiration_date=document_in.expiration_date,
        workspace_id=document_in.workspace_id,
        created_by=identity,
    )
    session.add(document)
    await session.commit()
    await session.refresh(document)

    return to_read(document)


@router.put("/{document_id}", response_model=DocumentRead)
async def update_document(
    document_id: str,
    document_in: DocumentUpdate,
    session: SessionDep,
    _identity: CurrentIdentity,
):
    """Update a document. Fields left out keep their current values."""
    if document_in.workspace_id is not None:
        await require_workspace(document_in.workspace_id, session)

    document = await get_document_or_404(document_id, session)

    update_data = document_in.model_dump(exclude_unset=True)
    for field in ("name", "description"):
        if isinstance(update_data.get(field), str):
            update_data[field] = update_data[field].strip()

    for field, value in update_data.items():
        if value is not None:
            setattr(document, field, value)

    await session.commit()
    await session.refresh(document)

    return to_read(document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(document_id: str, session: SessionDep, _identity: CurrentIdentity):
    """Stop tracking a document."""
    document = await get_document_or_404(document_id, session)
    await session.delete(document)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{document_id}/delete",
    status_code=status.HTTP_204_NO_CONTENT,
    include_in_schema=False,
)
async def delete_document_via_post(
    document_id: str, session: SessionDep, identity: CurrentIdentity
):
    """Delete for clients that cannot send DELETE."""
    return await delete_document(document_id, session, identity)
