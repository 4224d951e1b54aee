# agents/sarsa.py
from agents.config import CURRENT_ACTION, SARSA
from agents.tabular_q import Transition, ValueUpdater


class SarsaUpdater(ValueUpdater):
    """
    On-policy: the target uses the value of the action actually chosen next,
    so the pair recorded in cycle t is only updated in cycle t+1, once that action is known.

    With CURRENT_ACTION attribution (the default) the target uses the recorded reward,
    the delta seen when the previous action was picked. With the opt-in PREVIOUS_ACTION
    it uses the delta seen now, the outcome of the previous action.
    """
    name = SARSA

    def run_cycle(self, agent, reward):
        s = agent.state
        a, explored = agent.choose_action()
        td = None
        prev = agent.transition
        if prev.valid:
            r = prev.reward if self.attribution == CURRENT_ACTION else reward
            target = r + self.gamma * agent.q[s, a]
            td = self.apply(agent.q, prev.state, prev.action, target)
        agent.transition = Transition(s, a, reward, True)
        agent.move(a)
        return a, explored, td
