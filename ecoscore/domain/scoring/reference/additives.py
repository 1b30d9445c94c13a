"""
Food additive reference table.

EFSA-style assessments keyed by normalized E-number ("E471", "E150D").
Common names are matched as lower-case substrings of the ingredient text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class AdditiveEntry:
    """One additive with its risk assessment."""

    code: str
    name: str
    category: str
    risk_level: str  # low|medium|high
    concerns: tuple[str, ...] = ()
    common_names: tuple[str, ...] = ()
    microbiome_impact: Optional[str] = None
    microbiome_severity: Optional[str] = None  # mild|moderate|severe


def _table(*entries: AdditiveEntry) -> dict[str, AdditiveEntry]:
    return {entry.code: entry for entry in entries}


ADDITIVES: dict[str, AdditiveEntry] = _table(
    # Colours
    AdditiveEntry(
        "E102",
        "Tartrazine",
        "colour",
        "medium",
        ("Hyperactivity in children", "Possible allergic reactions in asthmatics"),
        ("tartrazine",),
    ),
    AdditiveEntry(
        "E110",
        "Sunset yellow FCF",
        "colour",
        "medium",
        ("Hyperactivity in children", "Cross-reaction with aspirin intolerance"),
        ("sunset yellow", "jaune orangé s"),
        "Suspected dysbiosis",
        "mild",
    ),
    AdditiveEntry(
        "E124",
        "Ponceau 4R",
        "colour",
        "medium",
        ("Hyperactivity in children",),
        ("ponceau 4r", "rouge cochenille a"),
    ),
    AdditiveEntry(
        "E129",
        "Allura red AC",
        "colour",
        "medium",
        ("Hyperactivity in children",),
        ("allura red", "rouge allura"),
    ),
    AdditiveEntry(
        "E150D",
        "Sulphite ammonia caramel",
        "colour",
        "medium",
        ("4-MEI contamination (possible carcinogen)",),
        ("caramel au sulfite d'ammonium", "sulphite ammonia caramel"),
    ),
    AdditiveEntry(
        "E171",
        "Titanium dioxide",
        "colour",
        "high",
        ("Genotoxicity cannot be ruled out (EFSA 2021)", "Banned in the EU since 2022"),
        ("titanium dioxide", "dioxyde de titane"),
        "Nanoparticles alter gut barrier",
        "moderate",
    ),
    # Preservatives
    AdditiveEntry(
        "E211",
        "Sodium benzoate",
        "preservative",
        "medium",
        ("Forms benzene with ascorbic acid", "Hyperactivity in children"),
        ("sodium benzoate", "benzoate de sodium"),
    ),
    AdditiveEntry(
        "E220",
        "Sulphur dioxide",
        "preservative",
        "medium",
        ("Asthma and intolerance reactions", "Destroys vitamin B1"),
        ("sulphur dioxide", "sulfur dioxide", "dioxyde de soufre"),
        "Antimicrobial effect on gut flora",
        "moderate",
    ),
    AdditiveEntry(
        "E249",
        "Potassium nitrite",
        "preservative",
        "high",
        ("Nitrosamine formation (probable carcinogen)", "Colorectal cancer risk with processed meat"),
        ("potassium nitrite", "nitrite de potassium"),
        "Alters nitrate-reducing bacteria",
        "moderate",
    ),
    AdditiveEntry(
        "E250",
        "Sodium nitrite",
        "preservative",
        "high",
        ("Nitrosamine formation (probable carcinogen)", "Colorectal cancer risk with processed meat"),
        ("sodium nitrite", "nitrite de sodium"),
        "Alters nitrate-reducing bacteria",
        "moderate",
    ),
    AdditiveEntry(
        "E252",
        "Potassium nitrate",
        "preservative",
        "high",
        ("Converted to nitrite in the body",),
        ("potassium nitrate", "nitrate de potassium"),
    ),
    # Antioxidants
    AdditiveEntry(
        "E300",
        "Ascorbic acid",
        "antioxidant",
        "low",
        (),
        ("ascorbic acid", "acide ascorbique"),
    ),
    AdditiveEntry(
        "E320",
        "Butylated hydroxyanisole (BHA)",
        "antioxidant",
        "high",
        ("Possible carcinogen (IARC 2B)", "Suspected endocrine disruptor"),
        ("butylated hydroxyanisole", "hydroxyanisole butylé"),
        "Suspected dysbiosis",
        "mild",
    ),
    AdditiveEntry(
        "E321",
        "Butylated hydroxytoluene (BHT)",
        "antioxidant",
        "medium",
        ("Suspected endocrine disruptor",),
        ("butylated hydroxytoluene", "hydroxytoluène butylé"),
    ),
    AdditiveEntry(
        "E330",
        "Citric acid",
        "acidity regulator",
        "low",
        (),
        ("citric acid", "acide citrique"),
    ),
    # Emulsifiers, thickeners
    AdditiveEntry(
        "E322",
        "Lecithins",
        "emulsifier",
        "low",
        (),
        ("lecithin", "lécithine"),
    ),
    AdditiveEntry(
        "E407",
        "Carrageenan",
        "thickener",
        "medium",
        ("Intestinal inflammation in animal studies",),
        ("carrageenan", "carraghénane"),
        "Promotes gut inflammation",
        "moderate",
    ),
    AdditiveEntry(
        "E415",
        "Xanthan gum",
        "thickener",
        "low",
        (),
        ("xanthan", "gomme xanthane"),
    ),
    AdditiveEntry(
        "E433",
        "Polysorbate 80",
        "emulsifier",
        "high",
        ("Low-grade intestinal inflammation", "Metabolic syndrome in animal studies"),
        ("polysorbate 80",),
        "Erodes the intestinal mucus layer",
        "severe",
    ),
    AdditiveEntry(
        "E450",
        "Diphosphates",
        "raising agent",
        "medium",
        ("High phosphate intake linked to cardiovascular risk",),
        ("diphosphate", "disodium pyrophosphate"),
    ),
    AdditiveEntry(
        "E466",
        "Carboxymethyl cellulose",
        "emulsifier",
        "medium",
        ("Alters gut microbiota composition",),
        ("carboxymethylcellulose", "carboxyméthylcellulose", "cellulose gum"),
        "Reduces microbial diversity",
        "severe",
    ),
    AdditiveEntry(
        "E471",
        "Mono- and diglycerides of fatty acids",
        "emulsifier",
        "medium",
        ("Linked to cardiovascular risk (NutriNet-Santé 2023)",),
        ("mono- and diglycerides", "mono- et diglycérides"),
        "Disrupts gut barrier",
        "moderate",
    ),
    AdditiveEntry(
        "E472E",
        "Mono- and diacetyl tartaric acid esters",
        "emulsifier",
        "low",
        (),
        ("datem",),
    ),
    # Flavour enhancers
    AdditiveEntry(
        "E621",
        "Monosodium glutamate",
        "flavour enhancer",
        "medium",
        ("Headaches in sensitive people", "Encourages overeating"),
        ("monosodium glutamate", "glutamate monosodique"),
    ),
    # Sweeteners
    AdditiveEntry(
        "E950",
        "Acesulfame K",
        "sweetener",
        "medium",
        ("Cancer risk association (NutriNet-Santé 2022)",),
        ("acesulfame", "acésulfame"),
        "Suspected dysbiosis",
        "mild",
    ),
    AdditiveEntry(
        "E951",
        "Aspartame",
        "sweetener",
        "medium",
        ("Possible carcinogen (IARC 2B, 2023)", "Contraindicated with phenylketonuria"),
        ("aspartame",),
        "Alters glucose tolerance via gut flora",
        "moderate",
    ),
    AdditiveEntry(
        "E955",
        "Sucralose",
        "sweetener",
        "medium",
        ("Genotoxic metabolite (sucralose-6-acetate)",),
        ("sucralose",),
        "Reduces beneficial bacteria",
        "moderate",
    ),
    AdditiveEntry(
        "E960",
        "Steviol glycosides",
        "sweetener",
        "low",
        (),
        ("steviol", "stévia", "stevia"),
    ),
)
