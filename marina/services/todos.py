"""Service for the marina operations to-do list."""

from __future__ import annotations

from marina.domain.bus import EventBus
from marina.domain.errors import RecordNotFound, ValidationError
from marina.domain.events import TodosChanged
from marina.domain.models import RecordId, TodoItem, same_id
from marina.repos.collections import TodoRepository
from marina.repos.store import TODOS


class TodoService:
    """Add, toggle and remove tasks. Every write returns the refetched list."""

    def __init__(self, todos: TodoRepository, bus: EventBus) -> None:
        self.todos = todos
        self.bus = bus

    def list_todos(self) -> list[TodoItem]:
        return self.todos.list_all()

    def add(self, task: str) -> list[TodoItem]:
        text = (task or "").strip()
        if not text:
            raise ValidationError("Task cannot be empty.", field="task")
        item = self.todos.add(text)
        self.bus.publish(TodosChanged(todo_id=item.id, action="added"))
        return self.todos.list_all()

    def toggle(self, todo_id: RecordId) -> list[TodoItem]:
        current = next(
            (t for t in self.todos.list_all() if same_id(t.id, todo_id)), None
        )
        if current is None:
            raise RecordNotFound(TODOS, todo_id)
        self.todos.set_completed(current.id, not current.is_completed)
        self.bus.publish(
            TodosChanged(
                todo_id=current.id,
                action="reopened" if current.is_completed else "completed",
            )
        )
        return self.todos.list_all()

    def delete(self, todo_id: RecordId) -> list[TodoItem]:
        self.todos.delete(todo_id)
        self.bus.publish(TodosChanged(todo_id=todo_id, action="deleted"))
        return self.todos.list_all()
