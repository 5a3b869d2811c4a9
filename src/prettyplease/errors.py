from typing import Sequence


class PrettyPleaseError(Exception):
    pass


class RemoteFetchError(PrettyPleaseError):
    pass


class WorkspaceError(PrettyPleaseError):
    pass


class FormattingError(PrettyPleaseError):
    path: str

    def __init__(self, *args, **kwargs):
        self.path = kwargs.pop("path")
        super().__init__(*args, **kwargs)


class PublishError(PrettyPleaseError):
    pass


class GitCommandError(Exception):
    args_: Sequence[str]
    returncode: int
    stderr: str

    def __init__(self, args_: Sequence[str], returncode: int, stderr: str):
        self.args_ = list(args_)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"git {' '.join(self.args_)} failed with exit code {returncode}: "
            f"{stderr.strip()}"
        )
