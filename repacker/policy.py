"""Lifecycle policy model

An ILM policy is read as an ordered list of states (its phases, in the order
Elasticsearch runs them), preceded by the implicit ``new`` state every index
starts in. Each state carries its actions and a transition to the next state,
gated on that state's ``min_age``, so the first declared phase is gated the
same way as every later one.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from repacker.defaults.settings import (
    AGE_CONDITION,
    DELETE_STATE,
    ILM_PHASE_ORDER,
    START_STATE,
)

logger = logging.getLogger(__name__)


@dataclass
class Transition:
    """A move to ``state_name`` once every condition in ``conditions`` holds"""

    state_name: str
    conditions: Dict[str, str] = field(default_factory=dict)


@dataclass
class PolicyState:
    """One state (ILM phase) of a lifecycle policy"""

    name: str
    actions: Dict[str, dict] = field(default_factory=dict)
    transitions: List[Transition] = field(default_factory=list)


@dataclass
class LifecyclePolicy:
    """
    A named lifecycle policy.

    Attributes:
        name (str): The policy id.
        states (list): :py:class:`PolicyState` objects in execution order.
    """

    name: str
    states: List[PolicyState] = field(default_factory=list)

    @classmethod
    def from_ilm(cls, name: str, body: dict) -> 'LifecyclePolicy':
        """
        Build a policy from an ILM policy body.

        :param name: The policy id
        :param body: Either an entry from
            :py:meth:`~.elasticsearch.client.IlmClient.get_lifecycle` (with a
            ``policy`` key) or the ``policy`` dictionary itself (with ``phases``)
        """
        policy = body.get('policy', body)
        phases = policy.get('phases', {})
        known = [p for p in ILM_PHASE_ORDER if p in phases]
        # Phases Elasticsearch does not know about keep their declared order, last
        ordered = [START_STATE] + known
        ordered += [p for p in phases if p not in ILM_PHASE_ORDER]
        states = []
        for idx, phase in enumerate(ordered):
            transitions = []
            if idx + 1 < len(ordered):
                nxt = ordered[idx + 1]
                conditions = {}
                if 'min_age' in phases[nxt]:
                    conditions[AGE_CONDITION] = phases[nxt]['min_age']
                transitions.append(Transition(nxt, conditions))
            actions = phases.get(phase, {}).get('actions', {})
            states.append(PolicyState(phase, dict(actions), transitions))
        logger.debug('Policy %s states: %s', name, [s.name for s in states])
        return cls(name=name, states=states)

    @classmethod
    def retention_policy(cls, name: str, retention: str) -> 'LifecyclePolicy':
        """
        The two-state policy given to a repacked index: a ``hot`` start state with
        no actions, moving to ``delete`` once the index is ``retention`` old.

        :param name: The new policy id
        :param retention: A rendered duration, e.g. ``3m``
        """
        return cls(
            name=name,
            states=[
                PolicyState(
                    'hot', {}, [Transition(DELETE_STATE, {AGE_CONDITION: retention})]
                ),
                PolicyState(DELETE_STATE, {'delete': {}}),
            ],
        )

    def delete_transition(self) -> Optional[Transition]:
        """
        :returns: The first transition, in state order, into the delete state that
            is gated on index age, or ``None``
        """
        for state in self.states:
            for transition in state.transitions:
                if (
                    transition.state_name == DELETE_STATE
                    and AGE_CONDITION in transition.conditions
                ):
                    return transition
        return None

    def to_ilm(self) -> dict:
        """
        :returns: The ``policy`` body for
            :py:meth:`~.elasticsearch.client.IlmClient.put_lifecycle`
        """
        min_ages = {}
        for state in self.states:
            for transition in state.transitions:
                if AGE_CONDITION in transition.conditions:
                    min_ages[transition.state_name] = transition.conditions[
                        AGE_CONDITION
                    ]
        phases = {}
        for state in self.states:
            if state.name == START_STATE:
                continue
            phases[state.name] = {
                'min_age': min_ages.get(state.name, '0ms'),
                'actions': state.actions,
            }
        return {'phases': phases}
