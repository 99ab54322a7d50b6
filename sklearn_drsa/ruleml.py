"""
RuleML representation of rule characteristics.

Characteristics are written as

    <evaluations>
        <evaluation measure="Support" value="4"/>
        <evaluation measure="Confidence" value="0.8"/>
    </evaluations>

i.e. one `<evaluation>` element per set characteristic. Non-finite values are
written as `NaN`, `Infinity` and `-Infinity`.
"""

import math
from typing import Dict, Union
from xml.etree import ElementTree

from sklearn_drsa.characteristics import MEASURES, RuleCharacteristics

EVALUATIONS_TAG = 'evaluations'
EVALUATION_TAG = 'evaluation'

# RuleML measure name -> characteristic
MEASURE_NAMES: Dict[str, str] = {
    RuleCharacteristics.characteristic(name).ruleml_name: name
    for name in MEASURES}
LEGACY_MEASURE_NAMES: Dict[str, str] = {
    'InconsistencyMeasure': 'epsilon',
    'EpsilonPrimMeasure': 'epsilon_prime',
}


def format_value(value) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return 'NaN'
        if math.isinf(value):
            return 'Infinity' if value > 0 else '-Infinity'
        return repr(value)
    return str(value)


def characteristics_to_ruleml(characteristics: RuleCharacteristics
                              ) -> ElementTree.Element:
    """:return: An `<evaluations>` element with an `<evaluation>` child for
        every set characteristic, in the order of `MEASURES`. Unset
        characteristics are skipped and nothing is computed.
    """
    if characteristics is None:
        raise TypeError("Rule characteristics to write as RuleML are None.")
    evaluations = ElementTree.Element(EVALUATIONS_TAG)
    for name, value in characteristics.items():
        ElementTree.SubElement(evaluations, EVALUATION_TAG, {
            'measure': RuleCharacteristics.characteristic(name).ruleml_name,
            'value': format_value(value),
        })
    return evaluations


def dumps(characteristics: RuleCharacteristics) -> str:
    """:return: `characteristics_to_ruleml` as string."""
    return ElementTree.tostring(characteristics_to_ruleml(characteristics),
                                encoding='unicode')


def characteristics_from_ruleml(source: Union[str, ElementTree.Element]
                                ) -> RuleCharacteristics:
    """Read all `<evaluation>` elements in `source` (which is, or contains,
    an `<evaluations>` element).

    Legacy measure names `InconsistencyMeasure` (epsilon) and
    `EpsilonPrimMeasure` (epsilon prime) are accepted.

    :return: plain `RuleCharacteristics`, set where an evaluation was found.
    :raise ValueError: on an unknown measure name or a malformed value.
    """
    if source is None:
        raise TypeError("RuleML source of rule characteristics is None.")
    root = ElementTree.fromstring(source) if isinstance(source, str) \
        else source
    characteristics = RuleCharacteristics()
    for evaluation in root.iter(EVALUATION_TAG):
        measure = evaluation.get('measure')
        text = evaluation.get('value')
        if measure is None or text is None:
            raise ValueError("RuleML evaluation needs 'measure' and 'value' "
                             "attributes, got {}".format(evaluation.attrib))
        name = MEASURE_NAMES.get(measure, LEGACY_MEASURE_NAMES.get(measure))
        if name is None:
            raise ValueError("Unknown RuleML measure {!r}".format(measure))
        # float() parses 'NaN', 'Infinity' and '-Infinity'
        setattr(characteristics, name, float(text))
    return characteristics
