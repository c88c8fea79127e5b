"""
Poker Manager - 扑克牌局管理核心

锦标赛与现金局的两块核心领域逻辑：
- 筹码分配：把买入金额换算成每种面值的实体筹码数量
- 余额与结算：记录玩家资金往来，并把净债务压缩为最少的转账

Packages:
    core: 纯领域逻辑层（无I/O、无状态）
    application: 会话控制器、配置与数据传输对象
"""

__version__ = "1.0.0"
__author__ = "Poker Manager Team"
