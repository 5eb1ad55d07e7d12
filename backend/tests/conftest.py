"""
Shared fixtures: a small clause catalog set covering every article layout.
"""

import json

import pytest

from will_engine.services.clauses import build_library


CATALOG_DOCUMENTS = {
    "testator": {
        "clauses": [
            {
                "id": "testator.declaration.will_title_simple",
                "type": "primary",
                "body": "I, [[ClientFullName]], declare this to be my Will.",
            },
            {
                "id": "testator.declaration.will_title_expanded",
                "type": "primary",
                "body": "I, [[ClientFullName]], of [[County]] County, [[State]], declare this to be my Will.",
            },
            {"id": "testator.revocation.prior_wills", "type": "always", "body": "I revoke all prior wills."},
            {"id": "testator.intent.independence", "type": "addon", "body": "I make this Will freely."},
            {"id": "testator.addon.aka", "type": "addon", "body": "I am also known as [[ClientAKA]]."},
        ]
    },
    "family": {
        "clauses": [
            {
                "id": "family.statement.widowed_children",
                "body": "I am widowed. My children are:[[ChildrenList]]",
            },
            {
                "id": "family.statement.married_children",
                "body": "I am married to [[SpouseFullName]]. My children are [[ChildrenListInline]].",
            },
            {
                "id": "family.statement.unmarried_no_children",
                "body": "I am not married and have no children.",
            },
        ]
    },
    "debts_taxes": {
        "primary_select_one": [
            {
                "id": "debts.primary.standard",
                "title": "Standard payment",
                "body": "I direct my Executor to pay my just debts.",
                "legacyIds": ["debts_standard", "debts.standard"],
            },
            {
                "id": "debts.primary.apportioned",
                "body": "Estate taxes shall be apportioned among the beneficiaries.",
                "default": True,
            },
        ],
        "extras_multi": [
            {"id": "debts.addon.mortgage", "body": "Secured debts need not be paid before distribution."},
        ],
        "boilerplate_always": [
            {"id": "debts.boiler.definitions", "body": "Claims are paid in [[CountyForProbate]] County."},
        ],
    },
    "gifts": {
        "primary_select_one": [
            {
                "id": "gifts.primary.tpp_to_spouse",
                "body": "I give my tangible personal property to [[DefaultTangibleBeneficiary]].",
            },
        ],
    },
    "residuary": {
        "primary_select_one": [
            {
                "id": "residuary.primary.charity",
                "body": "I give my residuary estate to [[CharityName]], or else to [[BackupCharitiesList]].",
            },
        ],
    },
    "executors": {
        "clauses": [
            {
                "id": "exec.primary.nomination",
                "type": "primary",
                "body": "I nominate [[PrimaryExecutorName]] as Executor.[[ExecutorAlternate1Clause]]",
            },
            {"id": "exec.bond.waived", "type": "bond", "body": "No bond shall be required."},
            {"id": "exec.bond.required", "type": "bond", "body": "My Executor shall post bond."},
            {"id": "exec.compensation.allowed", "type": "compensation", "body": "My Executor may be paid."},
            {"id": "exec.voting.majority", "type": "voting", "body": "Co-executors act by majority."},
            {"id": "exec.addon.ancillary", "type": "addon", "body": "My Executor may act in other states."},
        ]
    },
    "powers": {
        "extras_multi": [
            {"id": "powers.addon.sell", "body": "My Executor may sell property."},
            {"id": "powers.addon.invest", "body": "My Executor may invest."},
        ],
    },
    "misc": {
        "extras_multi": [
            {"id": "misc.addon.survivorship", "body": "A beneficiary must survive me by 30 days."},
            {"id": "misc.addon.no_contest", "body": "A beneficiary who contests this Will takes nothing."},
        ],
        "boilerplate_always": [
            {"id": "misc.boiler.headings", "body": "Headings are for convenience only."},
        ],
    },
    "trusts": {
        "primary_select_one": [
            {"id": "trusts.primary.minor", "body": "Shares for minors are held in trust until age [[MinorTrustAge]]."},
        ],
        "boilerplate_always": [
            {"id": "trusts.boiler.spendthrift", "body": "No interest may be assigned."},
        ],
    },
    "signature": {
        "clauses": [
            {
                "id": "sig.primary.attestation",
                "type": "primary",
                "body": "Signed by [[ClientFullName]] before [[WitnessOneName]] and [[WitnessTwoName]].",
            },
            {"id": "sig.addon.self_proving", "type": "addon", "body": "Self-proving affidavit attached."},
        ]
    },
}


@pytest.fixture
def catalog_documents():
    return json.loads(json.dumps(CATALOG_DOCUMENTS))


@pytest.fixture
def library(catalog_documents):
    return build_library(catalog_documents)


@pytest.fixture
def catalog_dir(tmp_path, catalog_documents):
    """The fixture catalogs written out as clauses-<library>.json files."""
    for name, document in catalog_documents.items():
        (tmp_path / f"clauses-{name}.json").write_text(json.dumps(document), encoding="utf-8")
    return tmp_path
