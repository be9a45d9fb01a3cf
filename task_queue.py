#!/usr/bin/env python3
"""
Background Task Queue for the Resume Modifier

Runs PDF compilation in the background so the web interface can return
immediately and poll for the result.

Uses a thread pool for execution with status tracking.
"""

import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

FINISHED_STATES = ('completed', 'failed', 'cancelled')


class TaskStatus(Enum):
    """Task status enumeration"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class Task:
    """Task data structure"""
    id: str
    task_type: str
    status: TaskStatus
    created_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    progress: float = 0.0
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'task_id': self.id,
            'task_type': self.task_type,
            'status': self.status.value,
            'progress': self.progress,
            'created_at': self.created_at.isoformat(),
        }
        if self.started_at:
            data['started_at'] = self.started_at.isoformat()
        if self.completed_at:
            data['completed_at'] = self.completed_at.isoformat()
        if self.error:
            data['error'] = self.error
        return data


class TaskQueue:
    """Background task queue with status tracking"""

    def __init__(self, max_workers: int = 2):
        self.max_workers = max_workers
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='task')
        self.tasks: Dict[str, Task] = {}
        self.lock = threading.Lock()

    def _execute_task(self, task_id: str, func: Callable, args: tuple, kwargs: dict):
        """Execute a single task"""
        with self.lock:
            task = self.tasks.get(task_id)
            if not task or task.status != TaskStatus.PENDING:
                return
            task.status = TaskStatus.RUNNING
            task.started_at = datetime.now()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            with self.lock:
                task.error = str(e)
                task.completed_at = datetime.now()
                task.status = TaskStatus.FAILED
            print(f"❌ Task {task_id} ({task.task_type}) failed: {e}")
            return

        with self.lock:
            task.result = result
            task.progress = 100.0
            task.completed_at = datetime.now()
            task.status = TaskStatus.COMPLETED

    def submit_task(self, task_type: str, func: Callable, *args,
                    metadata: Optional[Dict[str, Any]] = None, **kwargs) -> str:
        """Submit a task for background execution"""
        task_id = str(uuid.uuid4())
        task = Task(
            id=task_id,
            task_type=task_type,
            status=TaskStatus.PENDING,
            created_at=datetime.now(),
            metadata=metadata or {}
        )

        with self.lock:
            self.tasks[task_id] = task

        self.executor.submit(self._execute_task, task_id, func, args, kwargs)
        return task_id

    def get_task_status(self, task_id: str) -> Optional[Task]:
        """Get task status by ID"""
        return self.tasks.get(task_id)

    def get_recent_tasks(self, hours: int = 24) -> List[Task]:
        """Get tasks created within the last N hours"""
        cutoff = datetime.now() - timedelta(hours=hours)
        return [task for task in list(self.tasks.values()) if task.created_at >= cutoff]

    def cancel_task(self, task_id: str) -> bool:
        """Cancel a pending task"""
        with self.lock:
            task = self.tasks.get(task_id)
            if task and task.status == TaskStatus.PENDING:
                task.status = TaskStatus.CANCELLED
                task.completed_at = datetime.now()
                return True
        return False

    def wait(self, task_id: str, timeout: float) -> Optional[Task]:
        """Block until the task finishes or the timeout expires"""
        deadline = time.time() + timeout
        task = self.get_task_status(task_id)
        while task and task.status.value not in FINISHED_STATES and time.time() < deadline:
            time.sleep(0.05)
            task = self.get_task_status(task_id)
        return task

    def cleanup_old_tasks(self, hours: int = 24) -> int:
        """Remove old completed/failed tasks"""
        cutoff = datetime.now() - timedelta(hours=hours)

        with self.lock:
            stale = [
                task_id for task_id, task in self.tasks.items()
                if task.created_at < cutoff and task.status.value in FINISHED_STATES
            ]
            for task_id in stale:
                del self.tasks[task_id]

        return len(stale)

    def shutdown(self):
        """Shutdown the task queue"""
        self.executor.shutdown(wait=True)

    def get_stats(self) -> Dict[str, Any]:
        """Get task queue statistics"""
        stats = {
            'total_tasks': len(self.tasks),
            'by_status': {},
            'by_type': {},
            'recent_completion_rate': 0.0
        }

        for task in list(self.tasks.values()):
            status = task.status.value
            stats['by_status'][status] = stats['by_status'].get(status, 0) + 1
            stats['by_type'][task.task_type] = stats['by_type'].get(task.task_type, 0) + 1

        recent_tasks = self.get_recent_tasks(1)
        if recent_tasks:
            completed = sum(1 for t in recent_tasks if t.status == TaskStatus.COMPLETED)
            stats['recent_completion_rate'] = completed / len(recent_tasks)

        return stats


# Global task queue instance
_task_queue = None


def get_task_queue() -> TaskQueue:
    """Get the global task queue instance"""
    global _task_queue
    if _task_queue is None:
        _task_queue = TaskQueue()
    return _task_queue


def submit_pdf_compilation_task(tex_content: str) -> str:
    """Submit a PDF compilation task; the result holds the base64 PDF"""
    from pdf_utils import compile_latex_to_pdf, pdf_to_base64

    def compile_worker():
        result = compile_latex_to_pdf(tex_content)
        if not result['success']:
            raise RuntimeError(result['error'])
        return {
            'pdf': pdf_to_base64(result['pdf_bytes']),
            'cached': result['cached']
        }

    return get_task_queue().submit_task(
        "pdf_compilation",
        compile_worker,
        metadata={"tex_length": len(tex_content)}
    )


def cleanup_old_tasks() -> int:
    """Clean up old completed tasks"""
    return get_task_queue().cleanup_old_tasks()


def get_queue_stats() -> Dict[str, Any]:
    """Get task queue statistics"""
    return get_task_queue().get_stats()
