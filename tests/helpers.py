from __future__ import annotations

from sidingconfig.github_client import RemoteFile


class FakeContentsClient:
    """In-memory stand-in for GitHubContentsClient."""

    def __init__(self, files: dict[str, RemoteFile] | None = None, put_errors: list[Exception] | None = None) -> None:
        self.files = dict(files or {})
        self.put_errors = list(put_errors or [])
        self.puts: list[dict] = []
        self.sha_reads = 0
        self.closed = False

    def get_file_sha(self, owner, repo, path, *, ref=None):
        self.sha_reads += 1
        remote = self.files.get(path)
        return remote.sha if remote else None

    def get_file(self, owner, repo, path, *, ref=None):
        return self.files.get(path)

    def put_file(self, owner, repo, path, *, content, message, branch, sha=None):
        if self.put_errors:
            raise self.put_errors.pop(0)
        self.puts.append(
            {
                "owner": owner,
                "repo": repo,
                "path": path,
                "content": content,
                "message": message,
                "branch": branch,
                "sha": sha,
            }
        )
        new_sha = f"sha-{len(self.puts)}"
        self.files[path] = RemoteFile(path=path, sha=new_sha, content=content)
        return new_sha

    def close(self) -> None:
        self.closed = True
