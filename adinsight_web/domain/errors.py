"""
Error taxonomy.

Every boundary (model call, remote table, local store) catches its own native
failure and re-raises one of these with a message that can be shown to the
user as-is.
"""


class AdInsightError(Exception):
    """Base error. ``message`` is safe to display."""
    default_message = "알 수 없는 오류가 발생했습니다."

    def __init__(self, message: str = "", *, detail: str = ""):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(AdInsightError):
    default_message = "입력값이 올바르지 않습니다."


# Analysis
class ConfigurationError(AdInsightError):
    default_message = "API Key가 설정되지 않았습니다. 환경 변수를 확인해주세요."


class ProviderError(AdInsightError):
    default_message = "데이터를 분석하는 중 오류가 발생했습니다. 데이터 형식을 확인해주세요."


class MalformedResponseError(AdInsightError):
    default_message = "AI 응답을 해석할 수 없습니다. 다시 시도해주세요."


# Remote backend
class CloudUnavailable(AdInsightError):
    default_message = "클라우드 데이터를 불러오는 중 오류가 발생했습니다."


class CloudWriteError(AdInsightError):
    default_message = "클라우드 저장 중 예기치 않은 오류가 발생했습니다."


class CloudDeleteError(AdInsightError):
    default_message = "클라우드 데이터 삭제 중 오류 발생"


# Local medium
class LocalWriteError(AdInsightError):
    default_message = (
        "로컬 저장소에 데이터를 쓸 수 없습니다. 저장 공간이 부족하거나 권한이 없을 수 있습니다."
    )


class LocalDeleteError(AdInsightError):
    default_message = "로컬 리포트 삭제 실패"


ANALYSIS_ERRORS = (ConfigurationError, ProviderError, MalformedResponseError)
STORAGE_ERRORS = (
    CloudUnavailable,
    CloudWriteError,
    CloudDeleteError,
    LocalWriteError,
    LocalDeleteError,
)
