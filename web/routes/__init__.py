"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- accounts: 거래 상대방 계정
- projects: 프로젝트
- transactions: 거래/정산
- finance: 월별 요약, 재무 현황
"""
