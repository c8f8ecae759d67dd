"""
Flavr - Generation orchestrator.

Per-request state machine:

    RECEIVED -> FINGERPRINT_CHECK -> hit: DONE
             -> CACHE_LOOKUP      -> hit: DONE
             -> TEMPLATE_ATTEMPT  -> hit: DONE
             -> FULL_GENERATION   -> parse ok (with repair if needed): DONE
             -> FALLBACK_MODEL    -> DONE | FAILED

Early-tier failures never abort a request; they only trigger descent.
The only terminal error is a full generation that fails on both the
primary and the single fallback attempt. Exactly one MetricsRecord is
emitted per resolved request.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from uuid import uuid4

from flavr.config import FlavrSettings
from flavr.errors import CacheLookupError, GenerationError, TemplateGenerationError
from flavr.llm.client import GenerativeBackend, complete_within
from flavr.llm.model_router import fallback_config, get_model, select_tier
from flavr.llm.repair import parse_recipe
from flavr.models import (
    CacheQuery,
    GeneratedRecipe,
    GenerationRequest,
    GenerationResult,
    MetricsRecord,
    RecipeRecord,
    Tier,
)
from flavr.observability.analytics import CostAnalytics, estimate_cost, estimate_tokens
from flavr.pipeline.fingerprint import CachedGeneration, FingerprintCache, fingerprint
from flavr.pipeline.prompts import GENERATION_SYSTEM_PROMPT, build_generation_prompt
from flavr.retrieval.retriever import CachedRecipeRetriever
from flavr.store.base import RecipeStore
from flavr.templates.generator import TemplateGenerator
from flavr.templates.matcher import TemplateMatcher

logger = logging.getLogger(__name__)

ELEVATED_ENTITLEMENTS = {"plus", "premium", "developer"}

EntitlementCheck = Callable[[GenerationRequest], Awaitable[bool]]


async def default_entitlement_check(request: GenerationRequest) -> bool:
    """Elevated when the request's entitlement tier is a paid or internal one."""
    return request.entitlement.lower() in ELEVATED_ENTITLEMENTS


def cache_query_for(request: GenerationRequest) -> CacheQuery:
    """Map a request onto the cache tier's query filters."""
    cuisines = []
    if request.cuisine_preference:
        cuisines = [c for c in request.cuisine_preference.split(",") if c.strip()]
    return CacheQuery(
        cuisines=cuisines,
        difficulty=request.difficulty,
        max_cook_time=request.time_budget,
        dietary=request.dietary_needs,
        servings=request.servings,
        exclude_ids=request.exclude_ids,
    )


class GenerationOrchestrator:
    """
    Resolve recipe requests through cache, template and full generation.

    One instance per process: it owns the fingerprint cache and the
    analytics counters, and is injected into request handlers.
    """

    def __init__(
        self,
        backend: GenerativeBackend,
        *,
        retriever: CachedRecipeRetriever | None = None,
        matcher: TemplateMatcher | None = None,
        template_generator: TemplateGenerator | None = None,
        cache: FingerprintCache | None = None,
        analytics: CostAnalytics | None = None,
        entitlement_check: EntitlementCheck = default_entitlement_check,
        timeout: float = 35.0,
        fallback_timeout: float = 60.0,
        cache_lookup_limit: int = 5,
        reference_cost: float = 0.015,
        elevated_skips_early_tiers: bool = True,
    ) -> None:
        self.backend = backend
        self.retriever = retriever
        self.matcher = matcher or TemplateMatcher(reference_cost=reference_cost)
        self.template_generator = template_generator or TemplateGenerator(backend, timeout=timeout)
        self.cache = cache or FingerprintCache()
        self.analytics = analytics or CostAnalytics()
        self.entitlement_check = entitlement_check
        self.timeout = timeout
        self.fallback_timeout = fallback_timeout
        self.cache_lookup_limit = cache_lookup_limit
        self.reference_cost = reference_cost
        self.elevated_skips_early_tiers = elevated_skips_early_tiers

    @classmethod
    def from_settings(
        cls,
        settings: FlavrSettings,
        backend: GenerativeBackend,
        store: RecipeStore | None = None,
    ) -> "GenerationOrchestrator":
        """Build an orchestrator with every policy constant taken from settings."""
        return cls(
            backend,
            retriever=CachedRecipeRetriever(store) if store is not None else None,
            matcher=TemplateMatcher(
                threshold=settings.template_confidence_threshold,
                reference_cost=settings.full_generation_reference_cost,
            ),
            template_generator=TemplateGenerator(backend, timeout=settings.generation_timeout_seconds),
            cache=FingerprintCache(settings.fingerprint_cache_size),
            timeout=settings.generation_timeout_seconds,
            fallback_timeout=settings.fallback_timeout_seconds,
            cache_lookup_limit=settings.cache_lookup_limit,
            reference_cost=settings.full_generation_reference_cost,
            elevated_skips_early_tiers=settings.elevated_skips_early_tiers,
        )

    async def resolve(self, request: GenerationRequest) -> GenerationResult:
        """
        Serve one request from the cheapest tier that can satisfy it.

        Returns:
            A complete recipe tagged with the tier that served it

        Raises:
            GenerationError: If full generation failed after repair and fallback
        """
        started = time.perf_counter()
        correlation_id = uuid4().hex
        key = fingerprint(request)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Fingerprint cache hit for {key[:12]}")
            return self._served(
                started,
                correlation_id,
                key,
                recipe=cached.recipe,
                source=Tier.CACHE,
                fingerprint_hit=True,
                model=cached.model,
                template_name=cached.template_name,
                savings=self.reference_cost,
            )

        elevated = await self.entitlement_check(request)
        if elevated and self.elevated_skips_early_tiers:
            logger.info("Elevated caller: skipping cache and template tiers")
        else:
            result = await self._try_cache_tier(request, started, correlation_id, key)
            if result is not None:
                return result
            result = await self._try_template_tier(request, started, correlation_id, key)
            if result is not None:
                return result

        return await self._full_generation(request, started, correlation_id, key)

    async def persist(self, result: GenerationResult, owner_id: str) -> RecipeRecord | None:
        """
        Save a newly generated recipe to the shared store.

        Cache-tier results are already persisted and are skipped, as are
        orchestrators without a store.
        """
        if self.retriever is None or result.source is Tier.CACHE:
            return None
        record = result.recipe.model_copy(update={"id": None, "owner_id": owner_id})
        return await self.retriever.store.create(record)

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    async def _try_cache_tier(
        self,
        request: GenerationRequest,
        started: float,
        correlation_id: str,
        key: str,
    ) -> GenerationResult | None:
        if self.retriever is None:
            return None

        try:
            retrieval = await self.retriever.resolve(
                cache_query_for(request),
                requester_id=request.caller_id,
                limit=self.cache_lookup_limit,
            )
        except CacheLookupError as e:
            logger.warning(f"Cache lookup failed, degrading to template tier: {e}")
            return None

        if not retrieval.hit:
            return None

        return self._served(
            started,
            correlation_id,
            key,
            recipe=retrieval.records[0],
            source=Tier.CACHE,
            savings=self.reference_cost,
            retrieval_step=retrieval.step,
        )

    async def _try_template_tier(
        self,
        request: GenerationRequest,
        started: float,
        correlation_id: str,
        key: str,
    ) -> GenerationResult | None:
        match = self.matcher.match(request.intent)
        if not match.use_template or match.template is None:
            return None

        try:
            generated = await self.template_generator.generate(
                match.template,
                request.intent,
                ingredients=request.must_use or None,
                servings=request.servings,
            )
        except TemplateGenerationError as e:
            logger.warning(f"Template tier failed, degrading to full generation: {e}")
            return None

        template_name = match.template.name
        self.cache.put(
            key,
            CachedGeneration(recipe=generated.recipe, model=generated.model, template_name=template_name),
        )
        return self._served(
            started,
            correlation_id,
            key,
            recipe=generated.recipe,
            source=Tier.TEMPLATE,
            model=generated.model,
            template_name=template_name,
            cost=match.template.estimated_cost,
            savings=match.estimated_savings,
            validation="repaired" if generated.repaired else "valid",
        )

    async def _full_generation(
        self,
        request: GenerationRequest,
        started: float,
        correlation_id: str,
        key: str,
    ) -> GenerationResult:
        tier, budget = select_tier(request)
        user_prompt = build_generation_prompt(request)
        fallback_used = False

        try:
            generated = await self._attempt(tier, budget, self.timeout, user_prompt, request.servings)
        except GenerationError as e:
            fallback_tier, fallback_budget = fallback_config(budget)
            logger.warning(
                f"Primary generation ({tier}) failed: {e}. "
                f"Retrying once on {fallback_tier} with {fallback_budget} tokens"
            )
            fallback_used = True
            try:
                generated = await self._attempt(
                    fallback_tier, fallback_budget, self.fallback_timeout, user_prompt, request.servings
                )
            except GenerationError as fallback_error:
                self._failed(started, correlation_id)
                raise GenerationError(
                    f"Recipe generation failed after fallback: {fallback_error}"
                ) from fallback_error

        self.cache.put(key, CachedGeneration(recipe=generated.recipe, model=generated.model))
        return self._served(
            started,
            correlation_id,
            key,
            recipe=generated.recipe,
            source=Tier.GENERATED,
            model=generated.model,
            fallback_used=fallback_used,
            cost=estimate_cost(generated.model, generated.input_tokens, generated.output_tokens),
            validation="repaired" if generated.repaired else "valid",
        )

    async def _attempt(
        self,
        tier: str,
        max_tokens: int,
        timeout: float,
        user_prompt: str,
        servings: int,
    ) -> GeneratedRecipe:
        """One bounded generation call, parsed and validated."""
        text = await complete_within(
            self.backend,
            timeout,
            system_prompt=GENERATION_SYSTEM_PROMPT,
            user_prompt=user_prompt,
            tier=tier,
            max_tokens=max_tokens,
        )
        recipe, outcome = parse_recipe(text)
        if outcome.repaired:
            logger.info(f"Response repaired: {outcome.repairs or []} extracted={outcome.extracted}")
        if recipe.servings is None:
            recipe = recipe.model_copy(update={"servings": servings})

        return GeneratedRecipe(
            recipe=recipe,
            model=get_model(tier),
            tier=tier,
            repaired=outcome.repaired,
            input_tokens=estimate_tokens(GENERATION_SYSTEM_PROMPT + user_prompt),
            output_tokens=estimate_tokens(text),
        )

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def _served(
        self,
        started: float,
        correlation_id: str,
        key: str,
        *,
        recipe: RecipeRecord,
        source: Tier,
        fingerprint_hit: bool = False,
        fallback_used: bool = False,
        model: str | None = None,
        template_name: str | None = None,
        cost: float = 0.0,
        savings: float = 0.0,
        validation: str = "not_applicable",
        retrieval_step: str | None = None,
    ) -> GenerationResult:
        self.analytics.record(
            MetricsRecord(
                correlation_id=correlation_id,
                tier=source,
                fingerprint_hit=fingerprint_hit,
                fallback_used=fallback_used,
                latency_ms=(time.perf_counter() - started) * 1000,
                estimated_cost=cost,
                estimated_savings=savings,
                validation=validation,
                template_name=template_name,
                retrieval_step=retrieval_step,
            )
        )
        logger.info(f"Request {correlation_id} served by {source.value}")
        return GenerationResult(
            recipe=recipe,
            source=source,
            correlation_id=correlation_id,
            fingerprint=key,
            template_name=template_name,
            model=model,
        )

    def _failed(self, started: float, correlation_id: str) -> None:
        self.analytics.record(
            MetricsRecord(
                correlation_id=correlation_id,
                fallback_used=True,
                latency_ms=(time.perf_counter() - started) * 1000,
                validation="failed",
            )
        )
