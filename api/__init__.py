"""
API 層

FastAPI routers，只負責 request/response 轉換與鎖定：
- sessions：Session 建立、tick、查詢
"""
