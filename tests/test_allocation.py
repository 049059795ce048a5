import pytest

from services.errors import InsufficientFundsError, NotFoundError


def _assert_conserved(store):
    """Each income's records across all budgets add up to its allocated amount."""
    for income in store.incomes:
        held = sum(
            a.amount
            for b in store.budgets
            for a in b.allocations
            if a.income_id == income.id
        )
        assert held == pytest.approx(income.allocated_amount)
        assert 0 <= income.allocated_amount <= income.amount + 1e-9
    for budget in store.budgets:
        assert budget.funded_amount == pytest.approx(sum(a.amount for a in budget.allocations))


# ── allocate ─────────────────────────────────────────────────────────────────

def test_allocate_draws_oldest_income_first(incomes, budgets, allocation, store):
    feb = incomes.add(100, date="2024-02-01")
    jan = incomes.add(100, date="2024-01-01")
    rent = budgets.add("Rent", 200, start_date="2024-01-01")

    result = allocation.allocate(rent.id, 150)

    assert not result.is_partial
    assert result.allocated_amount == pytest.approx(150)
    assert [a.income_id for a in result.new_allocations] == [jan.id, feb.id]
    assert [a.amount for a in result.new_allocations] == [pytest.approx(100), pytest.approx(50)]
    assert jan.allocated_amount == pytest.approx(100)
    assert feb.allocated_amount == pytest.approx(50)
    assert rent.funded_amount == pytest.approx(150)
    assert rent.status == "partially_funded"
    _assert_conserved(store)


def test_allocate_partial_when_income_runs_out(incomes, budgets, allocation, store):
    incomes.add(30, date="2024-01-01")
    fun = budgets.add("Fun", 200)

    result = allocation.allocate(fun.id, 100)

    assert result.is_partial
    assert result.requested_amount == pytest.approx(100)
    assert result.allocated_amount == pytest.approx(30)
    assert fun.funded_amount == pytest.approx(30)
    assert fun.status == "partially_funded"
    assert allocation.get_unallocated_income() == pytest.approx(0)
    _assert_conserved(store)


def test_allocate_with_no_income_changes_nothing(budgets, allocation):
    fun = budgets.add("Fun", 50)

    result = allocation.allocate(fun.id, 20)

    assert result.allocated_amount == 0
    assert result.new_allocations == []
    assert fun.allocations == []
    assert fun.status == "unfunded"


def test_allocate_fully_funds_budget(incomes, budgets, allocation):
    incomes.add(500, date="2024-01-01")
    rent = budgets.add("Rent", 300)

    allocation.allocate(rent.id, 300)

    assert rent.status == "fully_funded"
    assert allocation.get_unallocated_income() == pytest.approx(200)


@pytest.mark.parametrize("amount", [0, -5, float("nan"), float("inf")])
def test_allocate_rejects_non_positive_amount(incomes, budgets, allocation, amount):
    income = incomes.add(100)
    rent = budgets.add("Rent", 50)

    with pytest.raises(ValueError):
        allocation.allocate(rent.id, amount)

    assert income.allocated_amount == 0
    assert rent.allocations == []
    assert rent.funded_amount == 0


def test_allocate_unknown_budget(incomes, allocation):
    incomes.add(100)

    with pytest.raises(NotFoundError):
        allocation.allocate("missing", 10)


def test_allocate_persists(incomes, budgets, allocation, reopen):
    income = incomes.add(80, date="2024-01-01")
    rent = budgets.add("Rent", 100)
    allocation.allocate(rent.id, 60)

    reloaded = reopen()

    assert reloaded.get_income(income.id).allocated_amount == pytest.approx(60)
    assert reloaded.get_budget(rent.id).funded_amount == pytest.approx(60)
    assert reloaded.get_budget(rent.id).allocations[0].income_id == income.id


# ── reallocate ───────────────────────────────────────────────────────────────

def _funded_pair(incomes, budgets, allocation):
    incomes.add(120, date="2024-01-01")
    a = budgets.add("A", 100)
    b = budgets.add("B", 100)
    allocation.allocate(a.id, 100)
    allocation.allocate(b.id, 20)
    return a, b


def test_reallocate_moves_funding(incomes, budgets, allocation, store):
    a, b = _funded_pair(incomes, budgets, allocation)
    unallocated = allocation.get_unallocated_income()

    result = allocation.reallocate(a.id, b.id, 40)

    assert a.funded_amount == pytest.approx(60)
    assert b.funded_amount == pytest.approx(60)
    assert a.funded_amount + b.funded_amount == pytest.approx(120)
    assert allocation.get_unallocated_income() == pytest.approx(unallocated)
    assert [t.kind for t in result.transfers_out] == ["transfer_out"]
    assert [t.kind for t in result.transfers_in] == ["transfer_in"]
    assert result.transfers_out[0].amount == pytest.approx(-40)
    assert result.transfers_in[0].counterpart_budget_id == a.id
    _assert_conserved(store)


def test_reallocate_keeps_earlier_records_untouched(incomes, budgets, allocation):
    a, b = _funded_pair(incomes, budgets, allocation)
    before = [(x.id, x.amount) for x in a.allocations]

    allocation.reallocate(a.id, b.id, 40)

    assert [(x.id, x.amount) for x in a.allocations[:len(before)]] == before


def test_reallocate_draws_per_income_in_funding_order(incomes, budgets, allocation, store):
    first = incomes.add(30, date="2024-01-01")
    second = incomes.add(70, date="2024-02-01")
    a = budgets.add("A", 100)
    b = budgets.add("B", 100)
    allocation.allocate(a.id, 100)

    result = allocation.reallocate(a.id, b.id, 50)

    moved = {t.income_id: t.amount for t in result.transfers_in}
    assert moved == {first.id: pytest.approx(30), second.id: pytest.approx(20)}
    _assert_conserved(store)


def test_reallocate_insufficient_funds_changes_nothing(incomes, budgets, allocation, store):
    a, b = _funded_pair(incomes, budgets, allocation)
    before_a = list(a.allocations)
    before_b = list(b.allocations)

    with pytest.raises(InsufficientFundsError) as exc_info:
        allocation.reallocate(b.id, a.id, 50)

    assert exc_info.value.requested == pytest.approx(50)
    assert a.allocations == before_a
    assert b.allocations == before_b
    assert a.funded_amount == pytest.approx(100)
    assert b.funded_amount == pytest.approx(20)


def test_reallocate_rejects_same_budget_and_bad_amount(incomes, budgets, allocation):
    a, b = _funded_pair(incomes, budgets, allocation)

    with pytest.raises(ValueError):
        allocation.reallocate(a.id, a.id, 10)
    for amount in (0, -1, float("nan"), float("inf")):
        with pytest.raises(ValueError):
            allocation.reallocate(a.id, b.id, amount)
    assert a.funded_amount == pytest.approx(100)
    assert b.funded_amount == pytest.approx(20)


def test_reallocate_unknown_target(incomes, budgets, allocation):
    a, _ = _funded_pair(incomes, budgets, allocation)

    with pytest.raises(NotFoundError):
        allocation.reallocate(a.id, "missing", 10)
    assert a.funded_amount == pytest.approx(100)


def test_reallocation_then_income_delete_stays_consistent(incomes, budgets, allocation, store):
    first = incomes.add(50, date="2024-01-01")
    incomes.add(50, date="2024-02-01")
    a = budgets.add("A", 100)
    b = budgets.add("B", 100)
    allocation.allocate(a.id, 100)
    allocation.reallocate(a.id, b.id, 60)

    incomes.delete(first.id)

    assert a.funded_amount == pytest.approx(40)
    assert b.funded_amount == pytest.approx(10)
    _assert_conserved(store)


# ── suggestions ──────────────────────────────────────────────────────────────

def test_suggestions_follow_start_date_and_do_not_mutate(incomes, budgets, allocation, store):
    incomes.add(150, date="2024-01-01")
    late = budgets.add("Late", 100, start_date="2024-03-01")
    early = budgets.add("Early", 100, start_date="2024-01-01")
    snapshot = store.snapshot()

    suggestions = allocation.suggest_budget_allocations()

    assert [(s.budget_id, s.suggested_amount) for s in suggestions] == [
        (early.id, pytest.approx(100)),
        (late.id, pytest.approx(50)),
    ]
    assert store.snapshot() == snapshot


def test_suggestions_skip_funded_budgets(incomes, budgets, allocation):
    incomes.add(300, date="2024-01-01")
    done = budgets.add("Done", 100, start_date="2024-01-01")
    open_ = budgets.add("Open", 100, start_date="2024-02-01")
    allocation.allocate(done.id, 100)

    suggestions = allocation.suggest_budget_allocations()

    assert [s.budget_id for s in suggestions] == [open_.id]


def test_apply_suggestions_funds_budgets(incomes, budgets, allocation, store):
    incomes.add(150, date="2024-01-01")
    a = budgets.add("A", 100, start_date="2024-01-01")
    b = budgets.add("B", 100, start_date="2024-02-01")

    results = allocation.apply_suggestions()

    assert len(results) == 2
    assert a.status == "fully_funded"
    assert b.funded_amount == pytest.approx(50)
    assert allocation.suggest_budget_allocations() == []
    _assert_conserved(store)


def test_available_income_excludes_fully_allocated(incomes, budgets, allocation):
    spent = incomes.add(40, date="2024-01-01")
    left = incomes.add(60, date="2024-02-01")
    rent = budgets.add("Rent", 100)
    allocation.allocate(rent.id, 40)

    available = allocation.get_available_income_for_allocation()

    assert [i.id for i in available] == [left.id]
    assert spent.is_fully_allocated
