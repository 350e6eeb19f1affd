"""
地址服務：由建立者身份推導遊戲地址

純計算邏輯，不涉及狀態轉換
"""
import hashlib


def derive_game_address(identity: str, tag: str = "game") -> str:
    """
    由身份 + 固定 tag 推導遊戲地址

    保證：
    - 同一個身份永遠得到同一個地址（不需要目錄服務）
    - 不同身份不會碰撞（SHA-256）

    範例：
        derive_game_address("alice") -> 64 位十六進位字串
    """
    payload = tag.encode("utf-8") + b":" + identity.encode("utf-8")
    return hashlib.sha256(payload).hexdigest()
