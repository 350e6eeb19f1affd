"""
HTTP API 層

只負責參數解析與錯誤轉換，所有業務邏輯集中在 core.GameManager
"""
