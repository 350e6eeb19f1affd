"""
核心業務邏輯層

這個 package 包含所有核心業務邏輯，包括：
- 狀態機：集中管理所有階段轉換
- Manager：create / join / move / reset 四個原子操作
- Escrow：押注的存入與釋放
- Locks：並發控制工具
"""
