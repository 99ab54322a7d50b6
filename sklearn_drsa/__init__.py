"""Dominance-based rough set approach (DRSA) and rule characteristics.

- `common`: three-valued logic, evaluation fields, decisions, distributions
- `dominance`: decision tables, dominance relation and cones
- `approximations`: unions of decision classes, (VC-)DRSA approximations
- `characteristics`: rule coverage and quality measures, filters
- `ruleml`: RuleML representation of rule characteristics

Limitations / Assumptions
=====

- no rule induction, rules are given by the objects they cover
- only numerical (float) condition attributes, `np.nan` marks missing values
- nominal condition attributes (PreferenceType.NONE) are only tested for
  equality
- unions and approximations need simple (one attribute) decisions without
  missing values
- no sparse input
"""

__all__ = ['approximations', 'characteristics', 'common', 'dominance',
           'ruleml', 'tests', 'util']
