import logging
from datetime import datetime
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from pydantic import AfterValidator, BaseModel, Field
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.models import Project, ProjectFile
from app.utils.auth import auth_dependency
from app.utils.storage import FileStorage, SAFE_MIME_TYPES, check_extension, file_category, get_file_storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["projects"])


def clean_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value

ProjectName = Annotated[str, AfterValidator(clean_name)]


class ProjectBase(BaseModel):
    name: ProjectName = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    system_prompt: Optional[str] = Field(default=None, max_length=50_000)

class ProjectUpdate(ProjectBase):
    name: Optional[ProjectName] = Field(default=None, min_length=1, max_length=200)

class ProjectFileResponse(BaseModel):
    id: int
    project_id: int
    name: str
    path: str
    type: str
    size: int
    uploaded_at: datetime

    class Config:
        from_attributes = True

class ProjectResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    system_prompt: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True

class ProjectDetail(ProjectResponse):
    files: List[ProjectFileResponse]


def get_project_or_404(db: Session, project_id: int) -> Project:
    project = db.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def content_type(upload: UploadFile, ext: str) -> str:
    return SAFE_MIME_TYPES.get(ext) or upload.content_type or "application/octet-stream"


@router.get('/api/projects', response_model=list[ProjectResponse])
def get_projects(db: Session = Depends(get_db), user = Depends(auth_dependency)):
    return db.query(Project).order_by(Project.created_at.desc(), Project.id.desc()).all()

@router.get('/api/projects/{project_id}', response_model=ProjectDetail)
def get_project(project_id: int, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    return get_project_or_404(db, project_id)

@router.post('/api/projects', response_model=ProjectResponse, status_code=201)
def create_project(params: ProjectBase, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    project = Project(**params.model_dump())
    db.add(project)
    db.commit()
    db.refresh(project)
    return project

@router.patch('/api/projects/{project_id}', response_model=ProjectResponse)
def update_project(project_id: int, params: ProjectUpdate, db: Session = Depends(get_db), user = Depends(auth_dependency)):
    project = get_project_or_404(db, project_id)
    for key, value in params.model_dump(exclude_unset=True).items():
        setattr(project, key, value)
    db.commit()
    db.refresh(project)
    return project

@router.delete('/api/projects/{project_id}', status_code=204)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    user = Depends(auth_dependency),
):
    project = get_project_or_404(db, project_id)
    for project_file in project.files:
        storage.delete(project_file.path)
    # files are removed by the cascade, conversations are detached
    db.delete(project)
    db.commit()
    return Response(status_code=204)


# Route to attach a file to a project
@router.post('/api/projects/{project_id}/files', response_model=ProjectFileResponse, status_code=201)
async def upload_project_file(
    project_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    user = Depends(auth_dependency),
):
    get_project_or_404(db, project_id)
    ext = check_extension(file.filename)
    file_content = await file.read()
    path, size = storage.save(file_content, file.filename, folder=f"projects/{project_id}")

    db_file = ProjectFile(
        project_id=project_id,
        name=file.filename,
        path=path,
        type=file_category(content_type(file, ext)),
        size=size,
    )
    db.add(db_file)
    db.commit()
    db.refresh(db_file)
    logger.info("Stored %s (%d bytes) for project %s", file.filename, size, project_id)
    return db_file

@router.delete('/api/project-files/{file_id}', status_code=204)
def delete_project_file(
    file_id: int,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    user = Depends(auth_dependency),
):
    db_file = db.get(ProjectFile, file_id)
    if not db_file:
        raise HTTPException(status_code=404, detail="File not found")
    storage.delete(db_file.path)
    db.delete(db_file)
    db.commit()
    return Response(status_code=204)


# Route to upload chat attachments
@router.post('/api/upload/chat')
async def upload_chat_files(
    files: List[UploadFile] = File(...),
    storage: FileStorage = Depends(get_file_storage),
    user = Depends(auth_dependency),
):
    uploaded = []
    for upload in files:
        ext = check_extension(upload.filename)
        mime_type = content_type(upload, ext)
        path, size = storage.save(await upload.read(), upload.filename, folder="chat")
        uploaded.append({
            "name": upload.filename,
            "url": path,
            "type": file_category(mime_type),
            "mimeType": mime_type,
            "size": size,
        })
    return {"files": uploaded}
