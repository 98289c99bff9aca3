# app/repositories/base.py

from app.repositories.file_storage import FileStorage


def repository_for(repo_cls, db):
    """
    依儲存後端取得 Repository：
    - AsyncSession -> 對應的 SQL Repository
    - FileStorage  -> FileStorage 本身 (它實作了所有 Repository 的方法)
    """
    if isinstance(db, FileStorage):
        return db
    return repo_cls(db)
