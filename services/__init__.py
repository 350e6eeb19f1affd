"""
服務層

這個 package 包含純計算邏輯，不負責狀態轉換：
- AddressService：由建立者身份推導遊戲地址
- OutcomeService：勝負判定與押注分配
- HistoryService：已結算回合的查詢
- StateService：state_version 管理
"""
