class TaskBoardError(Exception):
    """Base error carrying a client-safe message and an HTTP status"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TaskBoardError):
    status_code = 400


class NotFoundError(TaskBoardError):
    status_code = 404

    def __init__(self, message: str = "Task not found"):
        super().__init__(message)


class StoreError(TaskBoardError):
    """Persistence failure flattened to a fixed operation message"""

    status_code = 500
