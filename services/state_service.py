"""
State version 服務

每次 Game 成功變更就提升 state_version，
輪詢 GET /api/games/{address} 的客戶端比較版本號即可知道有沒有新狀態。
"""
import logging

from models import Game

logger = logging.getLogger(__name__)


def bump_state_version(game: Game, reason: str) -> int:
    game.state_version = (game.state_version or 0) + 1
    logger.debug(f"Game {game.address} state_version={game.state_version} ({reason})")
    return game.state_version
