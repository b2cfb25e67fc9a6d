"""
Tests for deals and the expected completion date derivation
"""
import pytest
from datetime import datetime

from dateutil.relativedelta import relativedelta

from cryptolend.core.changes import ChangeSet
from cryptolend.core.documents import utcnow
from cryptolend.core.exceptions import FieldValidationError, ReferenceResolutionError
from cryptolend.core.store import InMemoryDocumentStore
from cryptolend.modules.deals.services import DealService, add_months
from cryptolend.modules.interest_terms.schemas import InterestTermDocument


class TestMonthArithmetic:
    """Tests for calendar month addition"""
    
    @pytest.mark.unit
    @pytest.mark.parametrize("base,months,expected", [
        (datetime(2024, 1, 15, 9, 30), 6, datetime(2024, 7, 15, 9, 30)),
        (datetime(2023, 1, 31), 1, datetime(2023, 2, 28)),
        (datetime(2024, 1, 31), 1, datetime(2024, 2, 29)),
        (datetime(2024, 8, 31), 1, datetime(2024, 9, 30)),
        (datetime(2024, 11, 30), 3, datetime(2025, 2, 28)),
        (datetime(2024, 3, 1), 12, datetime(2025, 3, 1)),
    ])
    def test_add_months(self, base, months, expected):
        assert add_months(base, months) == expected


class TestDealSave:
    """Tests for saving deals against the SQLite store"""
    
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_creates_valid_deal(self, engine, test_lender, test_loan_request):
        deal = await engine.save("deal", {
            "lender_id": test_lender.id,
            "loan_details": test_loan_request.id
        })
        
        assert deal.id is not None
        assert deal.lender_id == test_lender.id
        assert deal.loan_details == test_loan_request.id
        assert deal.is_complete is False
        assert deal.expected_completion_date is not None
    
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_completion_date_is_six_months_after_creation(self, engine, test_lender, test_loan_request):
        deal = await engine.save("deal", {"lender_id": test_lender, "loan_details": test_loan_request})
        
        expected = test_loan_request.created_at + relativedelta(months=6)
        assert deal.expected_completion_date == expected
    
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_lender_may_be_the_borrower(self, engine, test_user, test_loan_request):
        deal = await engine.save("deal", {"lender_id": test_user.id, "loan_details": test_loan_request.id})
        
        assert deal.lender_id == test_loan_request.borrower_id
    
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_validates_required_fields(self, engine):
        with pytest.raises(FieldValidationError) as exc_info:
            await engine.save("deal", {})
        
        assert "lender_id" in exc_info.value.messages
        assert "loan_details" in exc_info.value.messages
    
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_end_of_month_rollover(self, engine, backdate, test_user, test_cryptocurrency):
        """Test a loan created Jan 31 with a one month term ends on the last day of February"""
        term = await engine.save("interest_term", {"loan_length": 1, "interest_rate": 4.5})
        loan = await engine.save("loan_request", {
            "borrower_id": test_user.id,
            "cryptocurrency": test_cryptocurrency.id,
            "interest_term": term.id,
            "request_amount": 250,
            "request_date": datetime(2023, 1, 31, 10, 0)
        })
        loan = await backdate(loan, datetime(2023, 1, 31, 10, 0))
        
        deal = await engine.save("deal", {"lender_id": test_user.id, "loan_details": loan.id})
        
        assert deal.expected_completion_date == datetime(2023, 2, 28, 10, 0)
    
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_missing_interest_term_is_not_persisted(self, engine, sql_store, test_lender, test_loan_request):
        """Test a loan request without terms blocks the deal"""
        await sql_store.persist(test_loan_request.model_copy(update={"interest_term": None}))
        
        with pytest.raises(ReferenceResolutionError, match="missing interest_term"):
            await engine.save("deal", {"lender_id": test_lender.id, "loan_details": test_loan_request.id})
        
        assert await sql_store.query_by_field("deal", "loan_details", test_loan_request.id) is None
    
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unknown_loan_request(self, engine, test_lender):
        with pytest.raises(ReferenceResolutionError, match="LoanRequest document not found") as exc_info:
            await engine.save("deal", {"lender_id": test_lender.id, "loan_details": 9999})
        
        assert exc_info.value.path == "loan_details"
    
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_reference_error_short_circuits_field_errors(self, engine):
        """Test resolution fails before the missing lender is reported"""
        with pytest.raises(ReferenceResolutionError):
            await engine.save("deal", {"loan_details": 9999})


class TestDealRederivation:
    """Tests for when the completion date is recomputed"""
    
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_recomputes_when_loan_details_reassigned(
        self, engine, test_user, test_lender, test_cryptocurrency, test_loan_request
    ):
        deal = await engine.save("deal", {"lender_id": test_lender.id, "loan_details": test_loan_request.id})
        
        long_term = await engine.save("interest_term", {"loan_length": 24, "interest_rate": 7})
        other_loan = await engine.save("loan_request", {
            "borrower_id": test_user.id,
            "cryptocurrency": test_cryptocurrency.id,
            "interest_term": long_term.id,
            "request_amount": 5000
        })
        
        updated = await engine.save("deal", {"id": deal.id, "loan_details": other_loan.id})
        
        assert updated.id == deal.id
        assert updated.expected_completion_date == other_loan.created_at + relativedelta(months=24)
    
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_unrelated_update_keeps_date(self, engine, sql_store, test_lender, test_loan_request, test_interest_term):
        """Test the stored date survives when loan_details is untouched"""
        deal = await engine.save("deal", {"lender_id": test_lender.id, "loan_details": test_loan_request.id})
        
        # Terms change underneath; without a loan_details change nothing is recomputed
        await sql_store.persist(test_interest_term.model_copy(update={"loan_length": 12}))
        updated = await engine.save("deal", {"id": deal.id, "is_complete": True})
        
        assert updated.is_complete is True
        assert updated.expected_completion_date == deal.expected_completion_date
    
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_derivation_is_idempotent(self, engine, test_lender, test_loan_request):
        deal = await engine.save("deal", {"lender_id": test_lender.id, "loan_details": test_loan_request.id})
        
        again = await engine.save("deal", {"id": deal.id}, change_set=ChangeSet.of("loan_details"))
        
        assert again.expected_completion_date == deal.expected_completion_date
    
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_supplied_date_is_overridden_on_create(self, engine, test_lender, test_loan_request):
        deal = await engine.save("deal", {
            "lender_id": test_lender.id,
            "loan_details": test_loan_request.id,
            "expected_completion_date": datetime(2000, 1, 1)
        })
        
        assert deal.expected_completion_date == test_loan_request.created_at + relativedelta(months=6)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_supplied_date_is_ignored_on_update(self, engine, test_lender, test_loan_request):
        """Test an update cannot overwrite the derived date"""
        deal = await engine.save("deal", {"lender_id": test_lender.id, "loan_details": test_loan_request.id})

        updated = await engine.save("deal", {"id": deal.id, "expected_completion_date": datetime(2000, 1, 1)})

        assert updated.expected_completion_date == test_loan_request.created_at + relativedelta(months=6)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_change_set_naming_the_date_rederives(
        self, engine, sql_store, test_lender, test_loan_request, test_interest_term
    ):
        deal = await engine.save("deal", {"lender_id": test_lender.id, "loan_details": test_loan_request.id})
        await sql_store.persist(test_interest_term.model_copy(update={"loan_length": 12}))

        updated = await engine.save("deal", {"id": deal.id}, change_set=ChangeSet.of("expected_completion_date"))

        assert updated.expected_completion_date == test_loan_request.created_at + relativedelta(months=12)


@pytest.fixture
async def graph(memory_engine):
    """Borrower, three month term and loan request in the in-memory store"""
    user = await memory_engine.save("user", {"email": "borrower@example.com", "password": "Password123"})
    crypto = await memory_engine.save("cryptocurrency", {"name": "Ether", "symbol": "ETH"})
    term = await memory_engine.save("interest_term", {"loan_length": 3, "interest_rate": 2.5})
    loan = await memory_engine.save("loan_request", {
        "borrower_id": user.id,
        "cryptocurrency": crypto.id,
        "interest_term": term.id,
        "request_amount": 750
    })
    return user, term, loan


class TestDealResolutionInMemory:
    """Reference resolution against the in-memory store"""
    
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_derives_date(self, memory_engine, graph):
        user, term, loan = graph
        
        deal = await memory_engine.save("deal", {"lender_id": user.id, "loan_details": loan.id})
        
        assert deal.expected_completion_date == loan.created_at + relativedelta(months=3)
    
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_interest_term_document(self, memory_engine, memory_store, graph):
        user, term, loan = graph
        await memory_store.persist(loan.model_copy(update={"interest_term": 4242}))
        
        with pytest.raises(ReferenceResolutionError, match="Interest term is missing or invalid"):
            await memory_engine.save("deal", {"lender_id": user.id, "loan_details": loan.id})
    
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_loan_length(self, memory_engine, memory_store, graph):
        user, term, loan = graph
        await memory_store.persist(InterestTermDocument.model_construct(
            id=term.id, loan_length="six", interest_rate=2.5
        ))
        
        with pytest.raises(ReferenceResolutionError, match="Interest term is missing or invalid"):
            await memory_engine.save("deal", {"lender_id": user.id, "loan_details": loan.id})
    
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_loan_request_without_creation_time_uses_now(self, graph):
        """Test the current time is the base when a loan request has no creation time"""
        user, term, loan = graph

        class UntimedStore(InMemoryDocumentStore):
            async def find_by_id(self, kind, document_id):
                if kind == "loan_request":
                    return loan.model_copy(update={"created_at": None})
                return term

        before = utcnow()
        expected = await DealService(UntimedStore()).calculate_expected_completion_date(loan.id)
        after = utcnow()

        assert before + relativedelta(months=3) <= expected <= after + relativedelta(months=3)
    
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_save_writes_nothing(self, memory_engine, memory_store, graph):
        user, term, loan = graph
        await memory_store.persist(loan.model_copy(update={"interest_term": None}))
        
        with pytest.raises(ReferenceResolutionError):
            await memory_engine.save("deal", {"lender_id": user.id, "loan_details": loan.id})
        
        assert await memory_store.query_by_field("deal", "loan_details", loan.id) is None
