"""DAX 서비스 예외"""


class DAXValidationError(ValueError):
    """입력 검증 실패: CSV 헤더/행, 필수 파라미터 (클라이언트 수정 가능)"""


class DAXStorageError(RuntimeError):
    """저장소 쓰기 실패 (원인 예외는 __cause__)"""
