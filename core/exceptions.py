"""
自定義異常類別

集中管理所有業務邏輯異常，方便 API 層統一處理

每個異常都帶有固定的 code，API 層以 code 回傳給客戶端，
客戶端不需要解析訊息字串。
"""


class RpsGameException(Exception):
    """所有遊戲異常的基類"""
    code = "GAME_ERROR"
    message = "Game error"

    def __init__(self, detail=None):
        self.detail = detail
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


# ============ Create 相關異常 ============

class InvalidStake(RpsGameException):
    """
    押注金額不合法（必須 > 0 且不超過 MAX_STAKE）

    上限來自儲存：贏家領回的 2 * stake 要放得進 signed 64-bit BIGINT，
    所以比 uint64 的範圍小
    """
    code = "INVALID_STAKE"
    message = "Invalid stake amount"

    def __init__(self, stake):
        self.stake = stake
        super().__init__(f"got {stake}")


class GameAlreadyActive(RpsGameException):
    """同一個建立者已經有一場尚未結束的遊戲"""
    code = "GAME_ALREADY_ACTIVE"
    message = "Game already active for this creator"

    def __init__(self, address):
        self.address = address
        super().__init__(f"address {address}")


# ============ Game 查詢異常 ============

class GameNotFound(RpsGameException):
    """遊戲不存在"""
    code = "GAME_NOT_FOUND"
    message = "Game not found"

    def __init__(self, address):
        self.address = address
        super().__init__(f"address {address}")


# ============ 狀態異常 ============

class InvalidGameState(RpsGameException):
    """目前的遊戲階段不允許此操作"""
    code = "INVALID_GAME_STATE"
    message = "Invalid game state for this operation"


class InvalidStateTransition(InvalidGameState):
    """非法的狀態轉換（由 GameStateMachine 拋出）"""
    code = "INVALID_STATE_TRANSITION"


# ============ Player 相關異常 ============

class CannotPlaySelf(RpsGameException):
    """建立者不能加入自己的遊戲"""
    code = "CANNOT_PLAY_SELF"
    message = "Cannot play against yourself"


class UnauthorizedPlayer(RpsGameException):
    """呼叫者不是此遊戲（或此操作）的合法玩家"""
    code = "UNAUTHORIZED_PLAYER"
    message = "Unauthorized player"


# ============ Move 相關異常 ============

class MoveAlreadyMade(RpsGameException):
    """玩家這一回合已經出過拳了"""
    code = "MOVE_ALREADY_MADE"
    message = "Move already made by this player"


class InvalidMove(RpsGameException):
    """不能把 NONE 當作出拳"""
    code = "INVALID_MOVE"
    message = "Invalid move"
