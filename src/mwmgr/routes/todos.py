"""
Todo Routes

Endpoints for the newsroom task list.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..models.todo import TodoPriority
from ..models.user import User
from ..services.engine_service import EngineService
from .deps import get_engine, get_current_user, unwrap

router = APIRouter(prefix="/todos", tags=["todos"])


class CreateTodoRequest(BaseModel):
    title: str
    description: Optional[str] = None
    assignee_id: Optional[UUID] = None
    priority: TodoPriority = TodoPriority.MEDIUM


class UpdateTodoRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    assignee_id: Optional[UUID] = None
    priority: Optional[TodoPriority] = None


@router.get("")
@router.get("/")
async def list_todos(
    completed: Optional[bool] = None,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """List tasks; completed=true/false filters by state"""
    if completed is None:
        todos = await engine.todo_service.list_todos()
    elif completed:
        todos = await engine.todo_service.list_completed()
    else:
        todos = await engine.todo_service.list_pending()
    return [t.to_dict() for t in todos]


@router.post("", status_code=201)
@router.post("/", status_code=201)
async def create_todo(
    request: CreateTodoRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    todo = unwrap(await engine.todo_service.add_todo(
        current_user,
        title=request.title,
        description=request.description,
        assignee_id=request.assignee_id,
        priority=request.priority,
    ))
    return todo.to_dict()


@router.patch("/{todo_id}")
async def update_todo(
    todo_id: UUID,
    request: UpdateTodoRequest,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    changes = request.model_dump(exclude_unset=True)
    todo = unwrap(await engine.todo_service.update_todo(current_user, todo_id, changes))
    return todo.to_dict()


@router.post("/{todo_id}/toggle")
async def toggle_todo(
    todo_id: UUID,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    """Flip the completion flag"""
    todo = unwrap(await engine.todo_service.toggle_complete(current_user, todo_id))
    return todo.to_dict()


@router.delete("/{todo_id}")
async def delete_todo(
    todo_id: UUID,
    current_user: User = Depends(get_current_user),
    engine: EngineService = Depends(get_engine),
):
    unwrap(await engine.todo_service.delete_todo(current_user, todo_id))
    return {"success": True}
