"""Prompt definitions for common 1C:Enterprise development tasks."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field

_OBJECT_TYPE_DESCRIPTION = "Тип объекта метаданных (например Document, Catalog)"
_OBJECT_NAME_DESCRIPTION = "Имя объекта метаданных"


class PromptError(Exception):
    """Raised when a prompt is unknown or a required argument is missing."""


@dataclass(frozen=True)
class PromptArgument:
    """An argument a prompt accepts."""

    name: str
    description: str = ""
    required: bool = False


@dataclass(frozen=True)
class Prompt:
    """A prompt definition as advertised to clients."""

    name: str
    description: str = ""
    arguments: tuple[PromptArgument, ...] = ()


@dataclass(frozen=True)
class PromptMessage:
    """A single message of a rendered prompt."""

    role: str
    text: str


@dataclass(frozen=True)
class PromptResult:
    """A rendered prompt: a description and the messages to send."""

    description: str
    messages: list[PromptMessage] = field(default_factory=list)


Arguments = Mapping[str, str] | None
_Handler = Callable[[Arguments], PromptResult]
_Step = str | tuple[str, Sequence[str]]


def required_arg(arguments: Arguments, name: str) -> str:
    """Return the non-empty value of argument ``name`` or raise :class:`PromptError`."""
    value = (arguments or {}).get(name, "")
    if not value:
        raise PromptError(f'missing required argument "{name}"')
    return value


def _object_args(arguments: Arguments) -> tuple[str, str]:
    return required_arg(arguments, "object_type"), required_arg(arguments, "object_name")


def _result(description: str, text: str) -> PromptResult:
    return PromptResult(description=description, messages=[PromptMessage(role="user", text=text)])


# --- text building blocks -------------------------------------------------


def _numbered(steps: Iterable[_Step]) -> str:
    """Render numbered steps; a step may carry indented bullet details."""
    lines = []
    for number, step in enumerate(steps, start=1):
        text, details = (step, ()) if isinstance(step, str) else step
        lines.append(f"{number}. {text}")
        lines.extend(f"   - {detail}" for detail in details)
    return "\n".join(lines)


def _task(intro: str, steps: Iterable[_Step]) -> str:
    return f"{intro}\n\nШаги:\n{_numbered(steps)}"


def _bullets(items: Iterable[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def _section(heading: str, *blocks: str, level: int = 2) -> str:
    return "\n\n".join([f"{'#' * level} {heading}", *blocks])


def _document(title: str, *blocks: str) -> str:
    return "\n\n".join([f"# {title}", *blocks])


def _example(lead: str, code: str) -> str:
    return f"{lead}\n  {code}"


def _mistakes(items: Iterable[tuple[str, str, str]]) -> str:
    return "\n\n".join(
        f"{number}. НЕПРАВИЛЬНО: {wrong}\n   ПРАВИЛЬНО: {right}\n   Причина: {reason}"
        for number, (wrong, right, reason) in enumerate(items, start=1)
    )


_SYNTAX_HELP = "bsl_syntax_help"


def _structure_step(verb: str, subject: str, object_type: str, object_name: str) -> str:
    return (
        f"Используй инструмент get_object_structure чтобы {verb} {subject} "
        f"(object_type: {object_type}, object_name: {object_name})"
    )


# --- handlers --------------------------------------------------------------


def _review_module(arguments: Arguments) -> PromptResult:
    object_type, object_name = _object_args(arguments)
    text = _task(
        f'Проведи ревью кода модуля объекта {object_type} "{object_name}".',
        [
            _structure_step("посмотреть", "структуру объекта", object_type, object_name),
            "Используй инструмент search_code чтобы найти код модулей этого объекта",
            (
                "Проанализируй код на:",
                [
                    "Ошибки и потенциальные баги",
                    "Нарушения стандартов разработки 1С",
                    "Производительность (лишние запросы к базе данных, "
                    "неоптимальные циклы, запросы в цикле)",
                    "Читаемость и именование переменных/процедур (убедись, что "
                    "зарезервированные слова И, Или, Не, Для, Если и др. "
                    "не используются как имена переменных)",
                    "Корректность работы с транзакциями и блокировками",
                ],
            ),
            f"Если нужна справка по встроенным функциям -- используй инструмент {_SYNTAX_HELP}",
            "Предложи конкретные улучшения с примерами кода на языке 1С",
        ],
    )
    return _result(f"Ревью модуля {object_type}.{object_name}", text)


def _write_posting(arguments: Arguments) -> PromptResult:
    document_name = required_arg(arguments, "document_name")
    text = _task(
        f'Помоги написать обработку проведения для документа "{document_name}".',
        [
            _structure_step("посмотреть", "структуру документа", "Document", document_name)
            + " -- реквизиты и табличные части",
            "Используй инструмент search_code чтобы найти текущий код модуля объекта",
            "Используй инструмент get_metadata_tree чтобы увидеть доступные регистры "
            "накопления, сведений и бухгалтерии",
            "Для каждого регистра, в который должен записывать документ, используй "
            "get_object_structure чтобы узнать его измерения, ресурсы и реквизиты",
            (
                "Напиши процедуру ОбработкаПроведения(Отказ, РежимПроведения) которая:",
                [
                    "Формирует движения по нужным регистрам",
                    "Использует запрос для получения данных табличной части с соединениями",
                    "Контролирует остатки при необходимости "
                    "(РежимПроведения = РежимПроведенияДокумента.Оперативный)",
                    "Очищает движения перед формированием новых",
                ],
            ),
            f"Если нужна справка по синтаксису -- используй инструмент {_SYNTAX_HELP}",
        ],
    )
    return _result(f"Обработка проведения документа {document_name}", text)


def _optimize_query(arguments: Arguments) -> PromptResult:
    query = required_arg(arguments, "query")
    text = _task(
        f"Проанализируй и оптимизируй следующий запрос 1С:\n\n{query}",
        [
            "Используй инструмент execute_query чтобы выполнить запрос и оценить "
            "объём возвращаемых данных",
            "Используй инструмент get_metadata_tree чтобы увидеть доступные объекты метаданных",
            "При необходимости используй get_object_structure для проверки структуры "
            "таблиц, участвующих в запросе",
            (
                "Проанализируй запрос на:",
                [
                    "Использование соединений (LEFT JOIN vs INNER JOIN)",
                    "Наличие условий, не покрытых индексами",
                    "Использование виртуальных таблиц с параметрами вместо вложенных запросов",
                    "Избыточные подзапросы и временные таблицы",
                    "Корректность использования РАЗЛИЧНЫЕ, ПЕРВЫЕ, СГРУППИРОВАТЬ",
                    "Возможность использования пакетных запросов",
                ],
            ),
            "Предложи оптимизированную версию запроса с пояснениями",
        ],
    )
    return _result("Оптимизация запроса 1С", text)


def _explain_config(arguments: Arguments) -> PromptResult:
    text = _task(
        "Объясни структуру текущей конфигурации 1С.",
        [
            "Используй инструмент get_metadata_tree чтобы получить полное дерево "
            "метаданных конфигурации",
            (
                "Проанализируй состав конфигурации:",
                [
                    "Какие подсистемы есть и за что они отвечают",
                    "Основные справочники и их назначение",
                    "Документы и бизнес-процессы которые они автоматизируют",
                    "Регистры накопления и сведений -- какие данные хранят",
                    "Регистры бухгалтерии и планы счетов (если есть)",
                    "Отчёты и обработки",
                    "Общие модули и их вероятная роль",
                    "Роли и разграничение доступа",
                ],
            ),
            "Опиши общую архитектуру конфигурации: какую предметную область она "
            "автоматизирует, как связаны основные объекты между собой",
            "Укажи на особенности и возможные проблемы архитектуры",
        ],
    )
    return _result("Объяснение структуры конфигурации 1С", text)


def _analyze_error(arguments: Arguments) -> PromptResult:
    error_text = required_arg(arguments, "error_text")
    text = _task(
        f"Проанализируй следующую ошибку 1С и помоги её исправить:\n\n{error_text}",
        [
            "Определи тип ошибки (синтаксическая, ошибка времени выполнения, ошибка "
            "запроса, ошибка блокировки, ошибка прав доступа)",
            "Если ошибка указывает на конкретный объект метаданных -- используй "
            "get_object_structure для просмотра его структуры",
            "Если ошибка связана с кодом модуля -- используй search_code для поиска "
            "исходного кода",
            "Если ошибка связана с запросом -- используй execute_query для проверки запроса",
            f"Если нужна справка по функциям -- используй {_SYNTAX_HELP}",
            (
                "Объясни:",
                [
                    "Причину ошибки",
                    "В каких условиях она возникает",
                    "Как её исправить (с примером кода)",
                    "Как предотвратить подобные ошибки в будущем",
                ],
            ),
        ],
    )
    return _result("Анализ ошибки 1С", text)


def _find_duplicates(arguments: Arguments) -> PromptResult:
    object_type, object_name = _object_args(arguments)
    text = _task(
        f'Найди дублирующийся и избыточный код в модулях объекта {object_type} "{object_name}".',
        [
            _structure_step("посмотреть", "структуру объекта", object_type, object_name),
            "Используй инструмент search_code чтобы найти код модулей объекта",
            (
                "Проанализируй код на:",
                [
                    "Дублирующиеся фрагменты кода (copy-paste)",
                    "Процедуры и функции с похожей логикой, которые можно объединить",
                    "Повторяющиеся запросы к базе данных",
                    "Одинаковые проверки условий в разных местах",
                    "Код, который можно вынести в общий модуль",
                ],
            ),
            (
                "Для каждого найденного дубля предложи рефакторинг:",
                [
                    "Выделение общей процедуры/функции",
                    "Параметризация отличающихся частей",
                    "Примеры кода после рефакторинга",
                ],
            ),
        ],
    )
    return _result(f"Поиск дублей в модуле {object_type}.{object_name}", text)


def _write_report(arguments: Arguments) -> PromptResult:
    description = required_arg(arguments, "description")
    text = _task(
        f"Помоги написать отчёт 1С по следующему описанию:\n\n{description}",
        [
            "Используй инструмент get_metadata_tree чтобы увидеть доступные объекты "
            "метаданных (справочники, документы, регистры)",
            "Определи источники данных для отчёта и используй get_object_structure для "
            "каждого из них, чтобы узнать структуру полей",
            "Используй execute_query чтобы проверить пробный запрос и убедиться что "
            "данные доступны",
            f"Если нужна справка по синтаксису запросов или функций -- используй {_SYNTAX_HELP}",
            (
                "Напиши:",
                [
                    "Текст запроса для СКД (системы компоновки данных) или прямого вывода",
                    "Описание структуры настроек СКД (группировки, поля, отборы, "
                    "условное оформление)",
                    "Код модуля отчёта если нужна программная обработка данных",
                    "Рекомендации по оптимизации при больших объёмах данных",
                ],
            ),
        ],
    )
    return _result("Помощь с написанием отчёта 1С", text)


def _explain_object(arguments: Arguments) -> PromptResult:
    object_type, object_name = _object_args(arguments)
    text = _task(
        f'Объясни назначение и устройство объекта {object_type} "{object_name}".',
        [
            _structure_step("получить", "полную структуру объекта", object_type, object_name)
            + " -- реквизиты, табличные части, измерения, ресурсы",
            "Используй инструмент search_code чтобы найти код модулей объекта",
            "Используй инструмент get_metadata_tree чтобы увидеть другие объекты "
            "конфигурации и понять связи",
            (
                "Объясни:",
                [
                    "Для чего предназначен этот объект в конфигурации",
                    "Какие данные он хранит (описание каждого реквизита и табличной части)",
                    "С какими другими объектами связан (ссылочные типы реквизитов)",
                    "Какую бизнес-логику содержат его модули",
                    "Как он используется в бизнес-процессах предприятия",
                ],
            ),
        ],
    )
    return _result(f"Объяснение объекта {object_type}.{object_name}", text)


def _query_syntax(arguments: Arguments) -> PromptResult:
    singular_tables = [
        "Справочник.X (НЕ Справочники.X)",
        "Документ.X (НЕ Документы.X)",
        "РегистрНакопления.X (НЕ РегистрыНакопления.X)",
        "РегистрСведений.X (НЕ РегистрыСведений.X)",
        "РегистрБухгалтерии.X",
        "ПланСчетов.X",
        "ПланВидовХарактеристик.X",
    ]
    mistakes = [
        (
            "ВЫБРАТЬ Перечисления.ВидыОпераций.Наименование",
            "используй ЗНАЧЕНИЕ(Перечисление.ВидыОпераций.Приход) в условии WHERE",
            "перечисления не являются таблицами",
        ),
        (
            "ВЫБРАТЬ * ИЗ Справочники.Номенклатура",
            "ВЫБРАТЬ * ИЗ Справочник.Номенклатура",
            "имена таблиц в единственном числе",
        ),
        (
            "ИЗ РегистрНакопления.Остатки",
            "ИЗ РегистрНакопления.ТоварыНаСкладах.Остатки(&Период)",
            "виртуальная таблица вызывается от конкретного регистра",
        ),
        (
            'ГДЕ Склад = "Основной"',
            "ГДЕ Склад = &Склад (передать ссылку через параметр)",
            "ссылочные поля нельзя сравнивать со строками",
        ),
        (
            "Документы.Реализация",
            "Документ.РеализацияТоваровУслуг (единственное число, полное имя)",
            "используется единственное число и полное имя объекта метаданных",
        ),
    ]
    text = _document(
        "Синтаксис запросов 1С",
        _section(
            "Именование таблиц по типам",
            "Имена таблиц в запросах используют ЕДИНСТВЕННОЕ число:\n" + _bullets(singular_tables),
            "Перечисления НЕ являются таблицами! Нельзя делать ВЫБРАТЬ ИЗ Перечисление.X.",
        ),
        _section(
            "Виртуальные таблицы регистров накопления",
            _bullets(
                f"РегистрНакопления.X.{table}"
                for table in (
                    "Остатки(&Период, Условия)",
                    "Обороты(&НачалоПериода, &КонецПериода, Периодичность, Условия)",
                    "ОстаткиИОбороты(&НачалоПериода, &КонецПериода, Периодичность, "
                    "МетодДополнения, Условия)",
                )
            ),
        ),
        _section(
            "Виртуальные таблицы регистров сведений",
            _bullets(
                f"РегистрСведений.X.{table}(&Период, Условия)"
                for table in ("СрезПоследних", "СрезПервых")
            ),
        ),
        _section(
            "Перечисления",
            _example(
                "Перечисления не являются таблицами. "
                "Используй функцию ЗНАЧЕНИЕ() в WHERE или CASE:",
                "ЗНАЧЕНИЕ(Перечисление.ИмяПеречисления.ИмяЗначения)",
            ),
        ),
        _section(
            "Предопределённые элементы",
            _example(
                "Обращение к предопределённым элементам справочников:",
                "ЗНАЧЕНИЕ(Справочник.Валюты.USD)",
            ),
        ),
        _section(
            "Параметры",
            _example(
                "Параметры указываются через &Имя и передаются через аргумент parameters:",
                "ГДЕ Дата > &ДатаНачала",
            ),
        ),
        _section("Типичные ошибки", _mistakes(mistakes)),
        _section(
            "Рабочий процесс",
            _numbered(
                [
                    "Вызови get_object_structure для получения точных имён полей объекта",
                    "Вызови validate_query для проверки синтаксиса написанного запроса",
                    "Вызови execute_query для выполнения проверенного запроса",
                ]
            ),
        ),
    )
    return _result("Синтаксис запросов 1С", text)


def _metadata_navigation(arguments: Arguments) -> PromptResult:
    category_tables = [
        ("Справочники", "Справочник"),
        ("Документы", "Документ"),
        ("РегистрыНакопления", "РегистрНакопления"),
        ("РегистрыСведений", "РегистрСведений"),
        ("РегистрыБухгалтерии", "РегистрБухгалтерии"),
        ("ПланыСчетов", "ПланСчетов"),
        ("ПланыВидовХарактеристик", "ПланВидовХарактеристик"),
    ]
    mapping = [f"{category} -> {table}.X" for category, table in category_tables]
    mapping.append("Перечисления -> НЕ являются таблицами (используй ЗНАЧЕНИЕ())")
    text = _document(
        "Навигация по метаданным конфигурации 1С",
        _section(
            "Порядок исследования незнакомой конфигурации",
            _numbered(
                [
                    "get_configuration_info: общая информация "
                    "(имя, версия, режим совместимости)",
                    "get_metadata_tree без фильтра: сводка по категориям "
                    "(сколько справочников, документов, регистров)",
                    "get_metadata_tree с filter по нужной категории: список объектов в категории",
                    "get_object_structure: структура конкретного объекта "
                    "(реквизиты, табличные части, типы)",
                ]
            ),
        ),
        _section("Маппинг категорий метаданных на имена таблиц запросов", _bullets(mapping)),
        _section(
            "Элементы структуры объекта",
            _bullets(
                [
                    "Реквизиты: поля объекта (для справочников, документов). "
                    "В запросах доступны напрямую.",
                    "Табличные части: вложенные таблицы. "
                    "В запросах доступны через точку от основной таблицы.",
                    "Измерения: ключевые поля регистров (определяют разрезы учёта).",
                    "Ресурсы: значения регистров "
                    "(суммы, количества, то что хранится в разрезе измерений).",
                    "Реквизиты регистров: дополнительные поля регистров "
                    "(не влияют на разрезы учёта).",
                ]
            ),
        ),
        _section(
            "Как найти нужный объект по бизнес-задаче",
            _bullets(
                [
                    "search_code: поиск по ключевым словам в коде модулей "
                    "(найти логику обработки, вычисления)",
                    "get_metadata_tree: обзор категорий для понимания структуры конфигурации",
                ]
            ),
        ),
        _section(
            "Когда использовать search_code vs metadata-инструменты",
            _bullets(
                [
                    "search_code: для поиска логики в коде "
                    "(как что-то вычисляется, где обрабатывается)",
                    "get_metadata_tree / get_object_structure: для структуры данных "
                    "(какие поля, типы, связи между объектами)",
                ]
            ),
        ),
    )
    return _result("Навигация по метаданным конфигурации 1С", text)


_RESERVED_RU = (
    "Если Тогда Иначе ИначеЕсли КонецЕсли Для Каждого Из По Цикл КонецЦикла Пока "
    "Процедура КонецПроцедуры Функция КонецФункции Перем Возврат Продолжить Прервать "
    "И Или Не Попытка Исключение КонецПопытки Истина Ложь Неопределено NULL Новый "
    "Экспорт Знач Перейти Асинх Ждать"
).split()

_RESERVED_EN = (
    "If Then Else ElsIf EndIf For Each In To Do EndDo While Procedure EndProcedure "
    "Function EndFunction Var Return Continue Break And Or Not Try Except EndTry "
    "True False Undefined NULL New Export Val Goto Async Await"
).split()


def _development_workflow(arguments: Arguments) -> PromptResult:
    task = required_arg(arguments, "task")
    checklist = [
        ("Знаешь ли ты точные имена объектов метаданных?", "get_metadata_tree"),
        ("Проверил ли структуру объектов, с которыми работаешь?", "get_object_structure"),
        ("Знаешь ли сигнатуру BSL-функций, которые используешь?", _SYNTAX_HELP),
        ("Проверил ли существующий код в этих модулях?", "search_code"),
    ]
    text = _document(
        "Рабочий процесс разработки на 1С",
        f"Задача: {task}",
        _section(
            "Пошаговый workflow",
            _numbered(
                [
                    "Изучи конфигурацию: вызови get_configuration_info для общей информации, "
                    "затем get_metadata_tree для обзора объектов",
                    "Найди релевантные объекты: вызови get_metadata_tree с фильтром по нужной "
                    "категории, search_code по ключевым словам задачи",
                    "Изучи структуру объектов: вызови get_object_structure для каждого "
                    "найденного объекта, запомни точные имена реквизитов",
                    "Найди существующий код: вызови search_code по именам процедур и "
                    "объектов, изучи текущую реализацию",
                    f"Уточни синтаксис: вызови {_SYNTAX_HELP} для нужных встроенных "
                    "функций платформы",
                    "Напиши код, используя точные имена из шага 3",
                    "Валидируй запросы: вызови validate_query перед execute_query для "
                    "каждого написанного запроса",
                ]
            ),
        ),
        _section(
            "Чеклист перед написанием кода",
            _bullets(f"{question} (если нет: {tool})" for question, tool in checklist),
        ),
        _section(
            "Зарезервированные слова",
            "Следующие слова являются ключевыми в языке 1С и НЕ МОГУТ использоваться "
            "как имена переменных, параметров или функций:",
            ", ".join(_RESERVED_RU),
            ", ".join(_RESERVED_EN),
            _section(
                "Частая ошибка",
                "НЕПРАВИЛЬНО: Для Каждого И Из Коллекция Цикл\n"
                "ПРАВИЛЬНО:   Для Каждого Элемент Из Коллекция Цикл",
                '"И" является логическим оператором (AND), '
                "использовать его как переменную нельзя.",
                level=3,
            ),
        ),
    )
    return _result("Рабочий процесс разработки на 1С", text)


_OBJECT_ARGUMENTS = (
    PromptArgument("object_type", _OBJECT_TYPE_DESCRIPTION, required=True),
    PromptArgument("object_name", _OBJECT_NAME_DESCRIPTION, required=True),
)


def _single(name: str, description: str) -> tuple[PromptArgument, ...]:
    return (PromptArgument(name, description, required=True),)


_PROMPTS: dict[str, tuple[Prompt, _Handler]] = {
    prompt.name: (prompt, handler)
    for prompt, handler in (
        (Prompt("review_module", "Ревью кода модуля 1С", _OBJECT_ARGUMENTS), _review_module),
        (
            Prompt(
                "write_posting",
                "Написание обработки проведения документа",
                _single("document_name", "Имя документа"),
            ),
            _write_posting,
        ),
        (
            Prompt(
                "optimize_query",
                "Оптимизация запроса 1С",
                _single("query", "Текст запроса на языке 1С"),
            ),
            _optimize_query,
        ),
        (Prompt("explain_config", "Объяснение структуры конфигурации"), _explain_config),
        (
            Prompt("analyze_error", "Анализ ошибки 1С", _single("error_text", "Текст ошибки из 1С")),
            _analyze_error,
        ),
        (Prompt("find_duplicates", "Поиск дублей в модуле", _OBJECT_ARGUMENTS), _find_duplicates),
        (
            Prompt(
                "write_report",
                "Помощь с написанием отчёта",
                _single("description", "Описание требуемого отчёта"),
            ),
            _write_report,
        ),
        (
            Prompt("explain_object", "Объяснение назначения объекта", _OBJECT_ARGUMENTS),
            _explain_object,
        ),
        (
            Prompt(
                "1c_query_syntax",
                "Синтаксис запросов 1С: таблицы, виртуальные таблицы, "
                "перечисления, типичные ошибки",
            ),
            _query_syntax,
        ),
        (
            Prompt(
                "1c_metadata_navigation",
                "Навигация по метаданным конфигурации 1С: "
                "порядок исследования, маппинг категорий",
            ),
            _metadata_navigation,
        ),
        (
            Prompt(
                "1c_development_workflow",
                "Рабочий процесс разработки на 1С: пошаговый workflow и чеклист",
                _single("task", "Описание задачи разработки"),
            ),
            _development_workflow,
        ),
    )
}


def list_prompts() -> list[Prompt]:
    """Return every available prompt, in registration order."""
    return [prompt for prompt, _ in _PROMPTS.values()]


def get_prompt(name: str, arguments: Arguments = None) -> PromptResult:
    """Render the prompt ``name`` with ``arguments``."""
    try:
        _, handler = _PROMPTS[name]
    except KeyError:
        raise PromptError(f'unknown prompt "{name}"') from None
    return handler(arguments)