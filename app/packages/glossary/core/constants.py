"""常量定义：集中维护状态码、角色名称与面向用户的提示文案。"""

HTTP_STATUS_OK = 200
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_UNAUTHORIZED = 401
HTTP_STATUS_FORBIDDEN = 403
HTTP_STATUS_NOT_FOUND = 404
HTTP_STATUS_CONFLICT = 409
HTTP_STATUS_INTERNAL_ERROR = 500

ACCESS_TOKEN_TYPE = "bearer"
MAGIC_LINK_PURPOSE = "magic_link"

ADMIN_ROLE = "admin"
DEFAULT_USER_ROLE = "user"

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"

WORKBOOK_TITLE_PREFIX = "SAMOO 하이테크 1본부"
IMPORT_HEADER_LINE = "공종/EN/KR/설명"
EXPORT_HEADERS = ("공종", "EN", "KR", "설명")

# 面向终端用户的提示保持韩文
MSG_TERM_ADDED = "용어가 성공적으로 추가되었습니다. 관리자 승인 후 표시됩니다."
MSG_TERM_UPDATED = "용어가 성공적으로 수정되었습니다."
MSG_TERM_DELETED = "용어가 성공적으로 삭제되었습니다."
MSG_TERM_APPROVED = "용어가 성공적으로 승인되었습니다."
MSG_TERM_REJECTED = "용어가 성공적으로 거부되었습니다."
MSG_TERM_NOT_FOUND = "용어를 찾을 수 없습니다."
MSG_TERM_EXISTS = "입력하신 용어는 이미 용어집에 있습니다."
MSG_REQUIRED_FIELDS = "모든 필수 필드를 채워주세요 (English, 한국어, 공종)."
MSG_NOTHING_TO_APPROVE = "승인할 대기 중인 용어가 없습니다."
MSG_NOTHING_TO_REJECT = "거부할 대기 중인 용어가 없습니다."
MSG_NOTHING_TO_DELETE = "삭제할 용어가 없습니다."
MSG_NOTHING_SELECTED = "삭제할 용어를 선택해주세요."
MSG_NOTHING_TO_EXPORT = "선택된 단어가 없습니다."
MSG_NO_VALID_TERMS = "가져올 유효한 용어가 없습니다. 템플릿을 확인해 주세요."
MSG_EMPTY_FILE = "선택한 파일이 비어 있거나 읽을 수 없습니다."
MSG_PERMISSION_DENIED = "권한이 없습니다."
MSG_NOT_AUTHENTICATED = "로그인이 필요합니다."
MSG_SIGN_IN_SENT = "Check your email for a login link!"
MSG_SIGN_IN_SUCCESS = "로그인되었습니다."
MSG_SIGN_OUT_SUCCESS = "로그아웃되었습니다."
MSG_INVALID_LINK = "로그인 링크가 유효하지 않거나 만료되었습니다."
MSG_INVALID_EMAIL = "올바른 이메일 주소를 입력해주세요."
MSG_UNKNOWN_DISCIPLINE = "알 수 없는 공종입니다."
MSG_STORE_ERROR = "데이터베이스 처리 중 오류가 발생했습니다."
MSG_TERMS_LOADED = "용어 목록을 불러왔습니다."
MSG_STATS_LOADED = "통계를 불러왔습니다."
MSG_DUPLICATES_FOUND = "{count}개의 중복 용어가 발견되었습니다."
MSG_NO_DUPLICATES = "중복 용어가 없습니다."
MSG_DUPLICATES_BLOCK_BULK = "{count}개의 중복 용어가 있어 일괄 처리할 수 없습니다. 중복 용어를 먼저 정리해 주세요."
MSG_ONLY_DUPLICATES_PENDING = "중복 용어를 제외하면 승인할 대기 중인 용어가 없습니다."

# 批量操作的提示文案，``{count}`` 为实际受影响行数
MSG_BULK_APPROVED = "{count}개의 용어가 승인되었습니다."
MSG_BULK_REJECTED = "{count}개의 대기 중인 용어가 거부되었습니다."
MSG_BULK_DELETED = "{count}개의 용어가 삭제되었습니다."
MSG_BULK_PARTIAL = "일괄 처리 중 오류가 발생했습니다. {count}개는 이미 처리되었습니다."
MSG_IMPORT_DONE = "{added}개의 용어가 추가되었습니다. 관리자 승인 후 표시됩니다."
MSG_IMPORT_DUPLICATES = "{duplicates}개의 중복 용어는 건너뛰었습니다."
MSG_EN_KR_REQUIRED = "영어와 한국어 용어는 필수입니다."
