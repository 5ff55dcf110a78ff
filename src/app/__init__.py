"""
App layer: HTTP 서버 (FastAPI).

역할:
- 파일 업로드 수신, 폼 값 파싱, 결과 bytes 응답
- ⚠️ 렌더/변환 로직 없음 (render에 위임)
"""
