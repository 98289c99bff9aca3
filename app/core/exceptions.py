# app/core/exceptions.py
# 儲存層的錯誤分類：讀取路徑回傳 None/False，寫入路徑違規時拋出以下例外，
# 由 Service 層轉成 HTTPException。


class OvraError(Exception):
    """儲存層例外的共同基底"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConflictError(OvraError):
    """重複的使用者名稱 / Email、重複的好友邀請"""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(OvraError):
    pass


class InvalidOperationError(OvraError):
    """例如：對自己送出好友邀請、回覆已處理過的邀請"""
    pass
