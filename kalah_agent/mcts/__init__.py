from .uct import MCTS, MCTSConfig, MCTSResult, Node

__all__ = ["MCTS", "MCTSConfig", "MCTSResult", "Node"]
