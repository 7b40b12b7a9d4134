# utils_text.py
"""
Helpers de texto: normalização, valores, dicionário de categorias e formatação.
"""

import re
import unicodedata

DEFAULT_CATEGORY = "Outros"


def normalize_text(text: str) -> str:
    text = (text or "").strip().lower()
    if not text:
        return ""
    text = unicodedata.normalize("NFKD", text)
    text = "".join(c for c in text if not unicodedata.combining(c))  # remove acentos
    text = re.sub(r"[^a-z0-9\s]", " ", text)  # tira pontuação
    text = re.sub(r"\s+", " ", text).strip()
    return text

def contains_word(text: str, word: str) -> bool:
    # bate palavra inteira quando possível (evita falsos positivos)
    return re.search(rf"\b{re.escape(word)}\b", text) is not None


# Dicionário canônico de categorias (a ordem desempata)
CATEGORY_MAP = {
    "Alimentação": [
        "comi", "almocei", "jantei", "lanchei", "pedi comida", "comer fora", "comi fora",
        "gastei com comida", "gastei em comida",
        "lanche", "pastel", "coxinha", "pizza", "hambúrguer", "hamburguer", "sushi", "esfiha",
        "marmita", "pf", "prato feito", "self service", "buffet", "rodízio", "rodizio",
        "restaurante", "lanchonete", "padaria", "cafeteria",
        "café", "cafe", "bebida", "suco", "refrigerante", "cerveja",
        "ifood", "delivery", "pedido comida",
        "mercado", "supermercado", "atacadão", "assai", "carrefour", "hortifruti",
    ],
    "Transporte": [
        "abasteci", "abastecer", "fui de uber", "peguei uber", "peguei 99",
        "gastei com transporte", "corrida",
        "gasolina", "etanol", "diesel", "combustível", "combustivel",
        "posto", "posto de gasolina", "abastecimento",
        "uber", "99", "taxi", "táxi", "ônibus", "onibus", "metrô", "metro", "trem", "passagem",
        "estacionamento", "pedágio", "pedagio",
        "oficina", "mecânico", "mecanico",
        "lavagem", "lava jato", "lavacar",
    ],
    "Moradia": [
        "paguei aluguel", "paguei condomínio", "conta de casa", "gastei com casa",
        "aluguel", "condomínio", "condominio",
        "luz", "energia", "conta de luz", "conta de energia",
        "água", "agua", "conta de água",
        "internet", "telefone", "iptu",
        "gas de cozinha", "botijão", "botijao",
        "reparo", "conserto", "manutenção",
        "faxina", "limpeza", "diarista",
    ],
    "Saúde": [
        "fui ao médico", "consulta médica", "gastei com saúde",
        "médico", "medico", "dentista", "psicólogo", "psicologo",
        "nutricionista", "fisioterapia", "terapia",
        "farmácia", "farmacia", "remédio", "remedio",
        "hospital", "clínica", "clinica",
        "exame", "checkup", "raio-x", "ultrassom", "ressonância",
        "plano de saúde", "convênio", "convenio", "coparticipação",
    ],
    "Pets": [
        "gastei com pet", "levei no veterinário",
        "cachorro", "gato",
        "ração", "racao", "areia gato",
        "vacina", "remédio pet",
        "veterinário", "veterinario", "petshop",
        "banho e tosa", "tosa", "hotel pet", "creche pet",
    ],
    "Dívidas": [
        "paguei fatura", "paguei dívida", "parcelei", "renegociei",
        "fatura", "cartão", "cartao", "cartão de crédito", "cartao de credito",
        "pagamento mínimo", "juros",
        "boleto", "financiamento", "empréstimo", "emprestimo",
        "acordo", "renegociação", "parcelamento",
        "em atraso", "consórcio", "consorcio",
    ],
    "Compras": [
        "comprei um", "comprei uma", "fiz uma compra", "encomenda",
        "roupa", "camisa", "camiseta", "calça", "calca", "tênis", "tenis", "sapato",
        "celular", "notebook", "computador", "tablet", "tv", "televisão",
        "shopping", "loja",
        "amazon", "shopee", "mercado livre",
        "magalu", "casas bahia", "americanas", "shein",
    ],
    "Lazer": [
        "viajei", "gastei com lazer",
        "cinema", "show", "evento", "festival",
        "viagem", "passeio", "boteco", "balada", "churrasco",
        "hotel", "airbnb", "resort",
        "jogo", "game", "videogame", "psn", "xbox",
    ],
    "Educação": [
        "estudei", "paguei curso", "mensalidade faculdade",
        "curso", "faculdade", "aula", "escola",
        "material escolar", "apostila", "livro",
        "udemy", "alura", "coursera", "hotmart",
        "mba", "especialização", "especializacao",
    ],
    "Investimentos": [
        "investi", "apliquei", "fiz aporte", "aporte mensal",
        "investimento", "ações", "acoes", "fundo", "fii",
        "cdb", "tesouro", "tesouro direto",
        "previdência", "previdencia", "poupança", "poupanca",
        "cripto", "bitcoin", "renda fixa", "renda variável",
    ],
    "Assinaturas": [
        "assinatura", "mensalidade", "plano mensal",
        "netflix", "spotify", "amazon prime", "prime video", "youtube", "youtube premium",
        "apple music", "deezer",
        "chatgpt", "hostinger",
        "icloud", "google one", "dropbox",
        "office 365", "canva", "notion", "figma",
    ],
}

CATEGORIES = list(CATEGORY_MAP) + [DEFAULT_CATEGORY]


def category_scores(text: str, category_map: dict | None = None) -> dict[str, int]:
    """Quantas palavras-chave de cada categoria aparecem (como trecho) no texto."""
    category_map = CATEGORY_MAP if category_map is None else category_map
    t = normalize_text(text)
    scores = {}
    for cat, keywords in category_map.items():
        scores[cat] = sum(
            1 for kw in {normalize_text(k) for k in keywords}
            if kw and kw in t
        )
    return scores


def classify_category(text: str, category_map: dict | None = None) -> str:
    """
    Categoria com mais palavras-chave no texto. Empate fica com a categoria
    declarada primeiro; nenhuma palavra -> "Outros".
    """
    best_cat, best_score = DEFAULT_CATEGORY, 0
    for cat, score in category_scores(text, category_map).items():
        if score > best_score:
            best_cat, best_score = cat, score
    return best_cat


def canonical_category(name: str | None) -> str | None:
    """'alimentacao' -> 'Alimentação'. Nome desconhecido -> None."""
    key = normalize_text(name or "")
    if not key:
        return None
    for cat in CATEGORIES:
        if normalize_text(cat) == key:
            return cat
    return None


# ---------------- valores ----------------

AMOUNT_TOKEN_RE = re.compile(r"^(?:r\$)?(\d[\d.,]*)$", re.IGNORECASE)
HAS_NUMBER_RE = re.compile(r"\d+(?:[.,]\d+)?")

def _money_to_float(raw: str) -> float | None:
    # se tiver vírgula E ponto, o último separador é o decimal
    if "," in raw and "." in raw:
        if raw.rfind(",") > raw.rfind("."):
            # BR: 1.000,50
            raw = raw.replace(".", "").replace(",", ".")
        else:
            # US: 1,000.50
            raw = raw.replace(",", "")
    elif "," in raw:
        # BR: 1000,50
        raw = raw.replace(",", ".")
    elif "." in raw:
        # milhar (1.000, 1.200.000) ou decimal (32.5)
        if len(raw.split(".")[-1]) == 3:
            raw = raw.replace(".", "")

    try:
        return float(raw)
    except ValueError:
        return None

def parse_amount_token(token: str) -> float | None:
    """'45' -> 45.0, '12,50' -> 12.5, 'R$30' -> 30.0, '1.234,56' -> 1234.56. Qualquer outra coisa -> None."""
    m = AMOUNT_TOKEN_RE.match((token or "").strip())
    if not m:
        return None
    return _money_to_float(m.group(1))

def has_number(text: str) -> bool:
    return HAS_NUMBER_RE.search(text or "") is not None


# ---------------- formatação ----------------

def fmt_brl(v: float) -> str:
    return f"R$ {v:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")

def fmt_pct(part: float, total: float) -> str:
    pct = (100.0 * part / total) if total else 0.0
    return f"{pct:.1f}%"

