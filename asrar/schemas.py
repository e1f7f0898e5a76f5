from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from .abjad_engine import AbjadSystem, Element
from .config import settings
from .reference_data import validate_ayah

CalculationType = Literal["name", "lineage", "phrase", "quran", "dhikr", "general"]

INSIGHT_FIELDS: dict[str, str] = {
    "name": "name_insights",
    "lineage": "lineage_insights",
    "phrase": "phrase_insights",
    "quran": "quran_insights",
    "dhikr": "dhikr_insights",
    "general": "general_insights",
}


def _default_system() -> str:
    return settings.default_system


# ── Requests ────────────────────────────────────────────────────────

class _CalculationRequestBase(BaseModel):
    # Accept both snake_case and the camelCase names used by mobile clients.
    model_config = ConfigDict(populate_by_name=True)

    remove_vowels: bool = Field(default=True, alias="removeVowels")
    ignore_punctuation: bool = Field(default=True, alias="ignorePunctuation")
    ignore_spaces: bool = Field(default=True, alias="ignoreSpaces")
    system: AbjadSystem = Field(default_factory=_default_system, validate_default=True)


class NameRequest(_CalculationRequestBase):
    type: Literal["name"]
    arabic_input: str | None = Field(default=None, max_length=500, alias="arabicInput")
    latin_input: str | None = Field(default=None, max_length=500, alias="latinInput")


class LineageRequest(_CalculationRequestBase):
    type: Literal["lineage"]
    your_name: str | None = Field(default=None, max_length=300, alias="yourName")
    mother_name: str | None = Field(default=None, max_length=300, alias="motherName")
    father_name: str | None = Field(default=None, max_length=300, alias="fatherName")


class PhraseRequest(_CalculationRequestBase):
    type: Literal["phrase"]
    arabic_input: str | None = Field(default=None, max_length=5000, alias="arabicInput")
    latin_input: str | None = Field(default=None, max_length=5000, alias="latinInput")


class QuranRequest(_CalculationRequestBase):
    type: Literal["quran"]
    surah_number: int | None = Field(default=None, ge=1, le=114, alias="surahNumber")
    ayah_number: int | None = Field(default=None, ge=1, alias="ayahNumber")
    pasted_ayah_text: str | None = Field(default=None, max_length=10000, alias="pastedAyahText")
    arabic_input: str | None = Field(default=None, max_length=10000, alias="arabicInput")

    @model_validator(mode="after")
    def ayah_exists(self) -> "QuranRequest":
        if self.surah_number is not None and self.ayah_number is not None:
            if not validate_ayah(self.surah_number, self.ayah_number):
                raise ValueError(f"Surah {self.surah_number} has no ayah {self.ayah_number}")
        return self


class DhikrRequest(_CalculationRequestBase):
    type: Literal["dhikr"]
    divine_name_id: int | None = Field(default=None, ge=1, le=99, alias="divineNameId")
    dhikr_text: str | None = Field(default=None, max_length=500, alias="dhikrText")
    arabic_input: str | None = Field(default=None, max_length=500, alias="arabicInput")


class GeneralRequest(_CalculationRequestBase):
    type: Literal["general"]
    arabic_input: str | None = Field(default=None, max_length=10000, alias="arabicInput")
    latin_input: str | None = Field(default=None, max_length=10000, alias="latinInput")


CalculationRequestUnion = Union[
    NameRequest, LineageRequest, PhraseRequest, QuranRequest, DhikrRequest, GeneralRequest
]
CalculationRequest = Annotated[CalculationRequestUnion, Field(discriminator="type")]

_calculation_request_adapter: TypeAdapter[Any] = TypeAdapter(CalculationRequest)


def parse_calculation_request(data: dict[str, Any]) -> Any:
    return _calculation_request_adapter.validate_python(data)


# ── Result building blocks ──────────────────────────────────────────

class InputMetadata(BaseModel):
    raw: str
    normalized: str
    language_detected: Literal["arabic", "latin", "mixed"]
    calculated_from: str | None = None
    calculation_note: str | None = None
    warning: str | None = None
    source_meta: dict[str, Any] = Field(default_factory=dict)


class CoreResultsModel(BaseModel):
    kabir: int
    saghir: int
    hadad_mod4: int = Field(ge=0, le=3)
    element: Element
    burj: int = Field(ge=1, le=12)
    burj_name: str
    sirr: int
    wusta: int
    kamal: int
    bast: int


class LetterFrequencyModel(BaseModel):
    letter: str
    count: int
    value: int
    element: Element


class ElementalAnalyticsModel(BaseModel):
    letter_freq: list[LetterFrequencyModel]
    element_counts: dict[Element, int]
    element_percents: dict[Element, int]
    total_letters: int
    dominant_element: Element
    weak_element: Element | None = None
    balance_score: int = Field(ge=0, le=100)


# ── Insights: name ──

class DivineNameConnection(BaseModel):
    number: int
    name: str
    arabic: str
    value: int
    distance: int


class QuranReferenceModel(BaseModel):
    surah_number: int
    surah_name: str
    surah_arabic: str
    ayah_number: int
    link: str


class NameInsights(BaseModel):
    archetype_title: str
    spiritual_guidance: str
    dominant_letter_element: Element
    divine_name_connection: list[DivineNameConnection]
    recommended_dhikr_count: list[int]
    best_time_window: str
    power_day: str
    quran_resonance: QuranReferenceModel | None = None


# ── Insights: lineage ──

class FamilyPattern(BaseModel):
    harmony: Literal["support", "neutral", "tension"]
    element_interaction: str


class PracticePlan(BaseModel):
    do_list: list[str]
    avoid_list: list[str]
    best_time: str


class LineageInsights(BaseModel):
    your_name_value: int
    mother_name_value: int
    father_name_value: int | None = None
    your_element: Element
    mother_element: Element
    combined_total: int
    combined_element: Element
    combined_saghir: int
    family_pattern: FamilyPattern
    key_takeaways: list[str]
    practice_plan: PracticePlan


# ── Insights: phrase ──

class RepeatedLetter(BaseModel):
    letter: str
    count: int


class ThemeDetection(BaseModel):
    dominant_element: Element
    repeated_letters: list[RepeatedLetter]
    sacred_number_near: int | None = None


class StructureInsights(BaseModel):
    top_repeated_letters: list[LetterFrequencyModel]
    center_letter: str
    center_significance: str


class PhraseInsights(BaseModel):
    theme_detection: ThemeDetection
    structure_insights: StructureInsights
    reflection_prompts: list[str]


# ── Insights: quran ──

class ResonanceLink(BaseModel):
    dominant_element: Element
    sacred_number: int
    distance: int
    kabir: int
    is_calculated: bool = True
    meaning: str
    description: str


class ReflectionBlock(BaseModel):
    prompt: str


class QuranInsights(BaseModel):
    surah_name: str | None = None
    surah_arabic: str | None = None
    ayah_number: int | None = None
    arabic_text: str | None = None
    resonance_link: ResonanceLink
    reflection_block: ReflectionBlock
    quran_com_link: str | None = None


# ── Insights: dhikr ──

class SelectedDivineName(BaseModel):
    number: int | None = None
    arabic: str
    transliteration: str
    meaning: str
    abjad_value: int
    match_strength: Literal["exact", "near", "distant"]


class SuggestedCounts(BaseModel):
    value_based: int | None = None
    traditional: list[int]


class DhikrTiming(BaseModel):
    power_day: str
    after_salah: list[str]


class PracticeGuidance(BaseModel):
    preparation: list[str]
    adab: list[str]


class DhikrInsights(BaseModel):
    selected_divine_name: SelectedDivineName | None = None
    suggested_counts: SuggestedCounts
    timing: DhikrTiming
    practice_guidance: PracticeGuidance


# ── Insights: general ──

class ElementalBalance(BaseModel):
    composition: dict[Element, int]
    balance_score: int
    advice: str


class SacredResonanceModel(BaseModel):
    nearest: int
    meaning: str
    distance: int
    factors: list[int]


class AdvancedMethod(BaseModel):
    value: int
    element: Element


class GeneralInsights(BaseModel):
    letter_frequency_chart: list[LetterFrequencyModel]
    elemental_balance: ElementalBalance
    sacred_resonance: SacredResonanceModel
    advanced_methods: dict[str, AdvancedMethod]


# ── Result record ───────────────────────────────────────────────────

class EnhancedCalculationResult(BaseModel):
    id: str
    timestamp: int
    type: CalculationType
    system: AbjadSystem
    input: InputMetadata
    core: CoreResultsModel
    analytics: ElementalAnalyticsModel
    name_insights: NameInsights | None = None
    lineage_insights: LineageInsights | None = None
    phrase_insights: PhraseInsights | None = None
    quran_insights: QuranInsights | None = None
    dhikr_insights: DhikrInsights | None = None
    general_insights: GeneralInsights | None = None

    @model_validator(mode="after")
    def exactly_one_insight(self) -> "EnhancedCalculationResult":
        populated = [field for field in INSIGHT_FIELDS.values() if getattr(self, field) is not None]
        expected = INSIGHT_FIELDS[self.type]
        if populated != [expected]:
            raise ValueError(f"{self.type} result must populate only {expected}, got {populated}")
        return self


# ── API responses ───────────────────────────────────────────────────

class CalculateResponse(BaseModel):
    result: EnhancedCalculationResult
    status: Literal["pending", "done"]
    task_id: str | None = None


class HistoryResponse(BaseModel):
    items: list[dict[str, Any]]
    total: int


class HistoryDeleteResponse(BaseModel):
    ok: bool = True
    removed: int


class DivineNameResponse(BaseModel):
    number: int
    arabic: str
    transliteration: str
    meaning: str
    values: dict[str, int]
    abjad_value: int | None = None


class DivineNameMatchResponse(BaseModel):
    number: int
    arabic: str
    transliteration: str
    meaning: str
    abjad_value: int
    distance: int
    match: Literal["exact", "approximate"]


class SurahResponse(BaseModel):
    number: int
    arabic: str
    transliteration: str
    english: str
    total_ayahs: int
    revelation_type: str
    link: str


class BurjResponse(BaseModel):
    index: int
    name: str
    arabic: str
    transliteration: str
    symbol: str
    planet: str
    day: str
    modality: str
    temperament: str
    element: Element
    spiritual_quality: str


class SacredResonanceResponse(BaseModel):
    value: int
    nearest: int
    distance: int
    delta: int
    is_exact: bool
    description: str
    factors: list[int]


class TaskStatusResponse(BaseModel):
    status: Literal["pending", "done", "failed"]
    result: dict[str, Any] | None = None
    error: str | None = None
