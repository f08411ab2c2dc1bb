"""
Umbrella therapeutic category rules.

Twenty-three fixed groupings used for analytics. A row resolves to one of
them either from its 3-letter category code or by weighted keyword scoring
of its generic name, brand, category and description text.

All keywords are lowercase; the classifier lowercases and strips
punctuation from the text before substring matching.
"""

# ---------------------------------------------------------------------------
# 3-letter therapeutic code → umbrella id
# ---------------------------------------------------------------------------
CATEGORY_CODE_TO_UMBRELLA: dict[str, str] = {
    "ANT": "ANTI_INFECTIVES",
    "CVS": "CARDIOVASCULAR",
    "RES": "RESPIRATORY",
    "CNS": "CNS",
    "ANE": "ANESTHESIA",
    "MSK": "MUSCULOSKELETAL",
    "OPH": "OPHTHALMIC",
    "HEM": "BLOOD",
    "END": "ENDO_CONTRACEPTIVES",
    "VAC": "VACCINES",
    "IMM": "IMMUNOMODULATORS",
    "DER": "DERMATOLOGICAL",
    "VIT": "VITAMINS",
    "OBG": "OB_GYN",
    "BPH": "BPH",
    "FER": "OB_GYN",      # fertility shares the OB/GYN umbrella
    "ONC": "ANTINEOPLASTICS_SUPPORT",
    "ENT": "ENT",
    "GIT": "GASTROINTESTINAL",
    "SIG": "SERA_IG",
    "TOX": "ANTIDOTES_POISONING",
    "RCM": "RADIOCONTRAST",
    "MSC": "MISC",
}

# ---------------------------------------------------------------------------
# Classifier weights and guardrails
# ---------------------------------------------------------------------------
CATEGORY_HIT_WEIGHT: int = 3
GENERIC_HIT_WEIGHT: int = 2
DESCRIPTION_HIT_WEIGHT: int = 1
DEVICE_HIT_WEIGHT: int = 2
MISC_DEVICE_HIT_WEIGHT: int = 4
NEGATIVE_CATEGORY_PENALTY: int = 3
NEGATIVE_GENERIC_PENALTY: int = 2

MIN_CLASSIFIER_SCORE: int = 3
MIN_CLASSIFIER_SEPARATION: int = 2

# ---------------------------------------------------------------------------
# Rules (order matters: ties keep the earlier rule)
# ---------------------------------------------------------------------------
UMBRELLA_CATEGORY_RULES: list[dict] = [
    {
        "id": "GASTROINTESTINAL",
        "label": "Gastrointestinal",
        "description":
            "GI tract, liver, pancreas, motility, acid suppression, antiemetics, laxatives, antidiarrheals.",
        "category_keywords": [
            "gastrointestinal",
            "gi",
            "gi tract",
            "acid suppress",
            "antiulcer",
            "anti-ulcer",
            "ulcer",
            "ppi",
            "proton pump inhibitor",
            "h2 blocker",
            "antacid",
            "antiemetic",
            "anti-emetic",
            "emetic",
            "laxative",
            "cathartic",
            "stool softener",
            "antidiarrheal",
            "antidiarrhoea",
            "antispasmodic",
            "spasmolytic",
            "hepatic",
            "liver",
            "pancreatic",
            "pancreatin",
            "digestive enzyme",
            "cholagogue",
            "cholestatic",
        ],
        "generic_keywords": [
            "omeprazole",
            "pantoprazole",
            "esomeprazole",
            "lansoprazole",
            "rabeprazole",
            "ranitidine",
            "famotidine",
            "cimetidine",
            "domperidone",
            "metoclopramide",
            "ondansetron",
            "granisetron",
            "loperamide",
            "diphenoxylate",
            "bisacodyl",
            "senna",
            "sennoside",
            "lactulose",
            "polyethylene glycol",
            "macrogol",
            "ors",
            "oral rehydration",
            "pancreatin",
            "ursodeoxycholic",
            "ursodiol",
            "cholestyramine",
        ],
    },
    {
        "id": "RESPIRATORY",
        "label": "Respiratory",
        "description":
            "Asthma, COPD, cough, cold, bronchodilators, mucolytics, antitussives, nasal decongestants.",
        "category_keywords": [
            "respiratory",
            "asthma",
            "copd",
            "bronchial",
            "bronchitis",
            "bronchodilator",
            "broncho dilator",
            "antiasthmatic",
            "anti-asthmatic",
            "antitussive",
            "anti-tussive",
            "cough syrup",
            "cough",
            "mucolytic",
            "expectorant",
            "cold preparation",
            "decongestant",
            "nasal spray",
            "nasal drops",
            "inhaler",
            "nebuliser",
            "nebulizer",
        ],
        "generic_keywords": [
            "salbutamol",
            "albuterol",
            "terbutaline",
            "formoterol",
            "salmeterol",
            "bambuterol",
            "budesonide",
            "beclomethasone",
            "fluticasone",
            "mometasone",
            "montelukast",
            "zafirlukast",
            "theophylline",
            "aminophylline",
            "ambroxol",
            "bromhexine",
            "guaifenesin",
            "xylometazoline",
            "oxymetazoline",
            "ipratropium",
            "tiotropium",
        ],
    },
    {
        "id": "CARDIOVASCULAR",
        "label": "Cardiovascular (CVS)",
        "description":
            "Hypertension, heart failure, ischemic heart disease, dyslipidemia, antiplatelets, anticoagulants.",
        "category_keywords": [
            "cardiovascular",
            "cvs",
            "cardiac",
            "hypertension",
            "antihypertensive",
            "anti-hypertensive",
            "blood pressure",
            "heart failure",
            "antianginal",
            "anti-anginal",
            "ischemic heart disease",
            "ischemia",
            "statin",
            "lipid lowering",
            "antihyperlipidemic",
            "antihyperlipidaemic",
            "antiplatelet",
            "anti-platelet",
            "anticoagulant",
            "antithrombotic",
            "antithrombotic",
            "diuretic",
            "ace inhibitor",
            "angiotensin receptor blocker",
            "arb",
            "beta blocker",
            "calcium channel blocker",
        ],
        "generic_keywords": [
            "amlodipine",
            "nifedipine",
            "felodipine",
            "atenolol",
            "metoprolol",
            "propranolol",
            "bisoprolol",
            "carvedilol",
            "losartan",
            "valsartan",
            "candesartan",
            "enalapril",
            "lisinopril",
            "ramipril",
            "furosemide",
            "spironolactone",
            "hydrochlorothiazide",
            "hctz",
            "torsemide",
            "atorvastatin",
            "simvastatin",
            "rosuvastatin",
            "pravastatin",
            "clopidogrel",
            "aspirin",
            "acetylsalicylic acid",
            "warfarin",
            "heparin",
            "enoxaparin",
            "digoxin",
            "isosorbide",
            "nitroglycerin",
            "glyceryl trinitrate",
        ],
    },
    {
        "id": "ANTI_INFECTIVES",
        "label": "Anti-infectives",
        "description":
            "Antibiotics, antivirals, antifungals, antituberculars, antimalarials, anthelmintics, antiparasitics.",
        "category_keywords": [
            "antiinfective",
            "anti-infective",
            "anti infective",
            "antibiotic",
            "antibacterial",
            "anti-bacterial",
            "antimicrobial",
            "anti-microbial",
            "antiseptic",
            "antiviral",
            "anti-viral",
            "antiretroviral",
            "art",
            "hiv",
            "antifungal",
            "anti-fungal",
            "antitubercular",
            "anti-tubercular",
            "tuberculosis",
            "tb",
            "antimalarial",
            "anti-malarial",
            "malaria",
            "anthelmintic",
            "antihelmintic",
            "antiparasitic",
            "anti-parasitic",
            "antiprotozoal",
        ],
        "generic_keywords": [
            "amoxicillin",
            "ampicillin",
            "ceftriaxone",
            "cefixime",
            "cephalexin",
            "cefuroxime",
            "ciprofloxacin",
            "levofloxacin",
            "ofloxacin",
            "moxifloxacin",
            "azithromycin",
            "clarithromycin",
            "erythromycin",
            "doxycycline",
            "tetracycline",
            "metronidazole",
            "tinidazole",
            "co-trimoxazole",
            "sulfamethoxazole",
            "trimethoprim",
            "gentamicin",
            "amikacin",
            "vancomycin",
            "rifampicin",
            "isoniazid",
            "ethambutol",
            "pyrazinamide",
            "streptomycin",
            "artemether",
            "lumefantrine",
            "artemether-lumefantrine",
            "chloroquine",
            "quinine",
            "acyclovir",
            "valacyclovir",
            "oseltamivir",
            "lamivudine",
            "efavirenz",
            "tenofovir",
            "nevirapine",
            "fluconazole",
            "itraconazole",
            "clotrimazole",
            "ketoconazole",
            "albendazole",
            "mebendazole",
            "praziquantel",
            "nitrofurantoin",
        ],
    },
    {
        "id": "CNS",
        "label": "Central Nervous System (CNS)",
        "description":
            "Antidepressants, antipsychotics, anticonvulsants, anxiolytics, sedatives, stimulants.",
        "category_keywords": [
            "cns",
            "neuro",
            "neurologic",
            "antidepressant",
            "anti-depressant",
            "antipsychotic",
            "anti-psychotic",
            "mood stabilizer",
            "antiepileptic",
            "anti-epileptic",
            "anticonvulsant",
            "sedative",
            "hypnotic",
            "anxiolytic",
            "benzodiazepine",
            "stimulant",
            "parkinson",
            "adhd",
        ],
        "generic_keywords": [
            "fluoxetine",
            "sertraline",
            "citalopram",
            "paroxetine",
            "amitriptyline",
            "imipramine",
            "haloperidol",
            "risperidone",
            "olanzapine",
            "quetiapine",
            "clozapine",
            "valproate",
            "valproic acid",
            "sodium valproate",
            "carbamazepine",
            "phenytoin",
            "lamotrigine",
            "diazepam",
            "lorazepam",
            "clonazepam",
            "alprazolam",
            "phenobarbital",
            "methylphenidate",
            "levodopa",
            "carbidopa",
            "biperiden",
        ],
    },
    {
        "id": "ANESTHESIA",
        "label": "Anesthesia",
        "description":
            "General and local anesthetics, neuromuscular blockers, adjuncts used in anesthesia.",
        "category_keywords": [
            "anesthesia",
            "anaesthesia",
            "anesthetic",
            "anaesthetic",
            "general anesthesia",
            "local anesthesia",
            "pre-anaesthetic",
            "premedication",
            "neuromuscular blocker",
            "muscle relaxant (anaesthesia)",
        ],
        "generic_keywords": [
            "lidocaine",
            "lignocaine",
            "bupivacaine",
            "ropivacaine",
            "procaine",
            "articaine",
            "propofol",
            "ketamine",
            "thiopental",
            "etomidate",
            "midazolam",
            "fentanyl",
            "sufentanil",
            "succinylcholine",
            "suxamethonium",
            "atracurium",
            "cisatracurium",
            "rocuronium",
            "vecuronium",
        ],
    },
    {
        "id": "MUSCULOSKELETAL",
        "label": "Musculoskeletal",
        "description":
            "Analgesics, NSAIDs, muscle relaxants, gout drugs, osteoporosis therapies.",
        "category_keywords": [
            "musculoskeletal",
            "rheumatology",
            "rheumatic",
            "analgesic",
            "pain relief",
            "nsaid",
            "nonsteroidal anti-inflammatory",
            "anti-inflammatory",
            "muscle relaxant",
            "antispasmodic (muscle)",
            "gout",
            "osteoporosis",
            "bone health",
        ],
        "generic_keywords": [
            "paracetamol",
            "acetaminophen",
            "ibuprofen",
            "diclofenac",
            "naproxen",
            "ketoprofen",
            "meloxicam",
            "celecoxib",
            "tramadol",
            "codeine",
            "morphine",
            "pethidine",
            "thiocolchicoside",
            "tizanidine",
            "baclofen",
            "colchicine",
            "allopurinol",
            "febuxostat",
            "alendronate",
            "risedronate",
            "calcitonin",
        ],
    },
    {
        "id": "OPHTHALMIC",
        "label": "Ophthalmic",
        "description": "Eye preparations: drops, ointments, intraocular therapies.",
        "category_keywords": [
            "ophthalmic",
            "eye",
            "ocular",
            "eye drops",
            "eye ointment",
            "eye gel",
            "intraocular",
            "glaucoma",
            "tear substitute",
        ],
        "generic_keywords": [
            "timolol",
            "latanoprost",
            "bimatoprost",
            "brimonidine",
            "pilocarpine",
            "tobramycin",
            "gentamicin",
            "ciprofloxacin",
            "chloramphenicol",
            "ofloxacin",
            "olopatadine",
            "ketotifen",
            "artificial tears",
            "carboxymethylcellulose",
            "hyaluronate",
        ],
    },
    {
        "id": "BLOOD",
        "label": "Blood",
        "description":
            "Hematinics, iron, B12, folate, erythropoiesis-stimulating agents, some coagulation-related drugs.",
        "category_keywords": [
            "hematinic",
            "haematinic",
            "iron supplement",
            "iron and folate",
            "anemia",
            "anaemia",
            "erythropoietin",
            "anticoagulant",
            "antiplatelet",
            "coagulation",
            "hemostatic",
            "haemostatic",
        ],
        "generic_keywords": [
            "ferrous",
            "iron",
            "ferric",
            "folic acid",
            "folate",
            "vitamin b12",
            "cyanocobalamin",
            "hydroxocobalamin",
            "erythropoietin",
            "epoetin",
            "tranexamic",
            "etamsylate",
        ],
    },
    {
        "id": "ENDO_CONTRACEPTIVES",
        "label": "Endocrine & Contraceptives",
        "description":
            "Diabetes, thyroid, adrenal hormones and combined hormonal or progestin-only contraceptives.",
        "category_keywords": [
            "endocrine",
            "diabetes",
            "antidiabetic",
            "anti-diabetic",
            "insulin",
            "thyroid",
            "hypothyroidism",
            "hyperthyroidism",
            "hormone replacement",
            "hrt",
            "contraceptive",
            "oral contraceptive",
            "ocp",
            "family planning",
            "injectable contraceptive",
            "implant",
        ],
        "generic_keywords": [
            "metformin",
            "glibenclamide",
            "glyburide",
            "glimepiride",
            "gliclazide",
            "insulin",
            "aspart",
            "lispro",
            "glargine",
            "detemir",
            "levothyroxine",
            "thyroxine",
            "methimazole",
            "carbimazole",
            "ethinylestradiol",
            "levonorgestrel",
            "norethisterone",
            "medroxyprogesterone",
            "desogestrel",
            "drospirenone",
        ],
    },
    {
        "id": "VACCINES",
        "label": "Vaccines",
        "description":
            "Preventive immunization products: childhood schedule, adult vaccines, toxoids.",
        "category_keywords": [
            "vaccine",
            "vaccination",
            "immunization",
            "immunisation",
            "toxoid",
            "boosters",
            "penta",
            "pentavalent",
            "bcg",
            "mmr",
            "hpv vaccine",
        ],
        "generic_keywords": [
            "bcg",
            "measles vaccine",
            "mmr",
            "dpt",
            "diphtheria",
            "tetanus toxoid",
            "polio vaccine",
            "opv",
            "ipv",
            "hepatitis b vaccine",
            "pneumococcal vaccine",
            "hpv",
            "rabies vaccine",
            "influenza vaccine",
            "covid-19 vaccine",
        ],
    },
    {
        "id": "IMMUNOMODULATORS",
        "label": "Immunomodulators",
        "description":
            "Systemic steroids, immunosuppressants, biologics primarily used to modulate immune response.",
        "category_keywords": [
            "immunomodulator",
            "immunomodulatory",
            "immunosuppressant",
            "immunosuppressive",
            "biologic",
            "disease modifying",
            "dmard",
            "autoimmune",
            "rheumatoid arthritis",
            "transplant",
        ],
        "generic_keywords": [
            "prednisone",
            "prednisolone",
            "dexamethasone",
            "hydrocortisone",
            "methylprednisolone",
            "azathioprine",
            "cyclosporine",
            "cyclosporin",
            "tacrolimus",
            "mycophenolate",
            "methotrexate",
            "infliximab",
            "adalimumab",
            "rituximab",
        ],
    },
    {
        "id": "DERMATOLOGICAL",
        "label": "Dermatological",
        "description":
            "Topical creams, ointments, lotions, gels for skin conditions, acne, infections, inflammation.",
        "category_keywords": [
            "dermatological",
            "dermatology",
            "skin",
            "topical",
            "acne",
            "psoriasis",
            "eczema",
            "atopic dermatitis",
            "antifungal cream",
            "antiseptic cream",
            "keratolytic",
        ],
        "generic_keywords": [
            "clotrimazole",
            "miconazole",
            "ketoconazole",
            "terbinafine",
            "salicylic acid",
            "benzoyl peroxide",
            "tretinoin",
            "adapalene",
            "betamethasone",
            "hydrocortisone",
            "clobetasol",
            "fusidic acid",
            "neomycin",
            "silver sulfadiazine",
            "urea cream",
        ],
    },
    {
        "id": "VITAMINS",
        "label": "Vitamins & Supplements",
        "description":
            "Vitamins, minerals, multivitamins, nutritional supplements, trace elements.",
        "category_keywords": [
            "vitamin",
            "multivitamin",
            "multi-vitamin",
            "supplement",
            "nutritional supplement",
            "mineral",
            "trace element",
            "nutrition",
        ],
        "generic_keywords": [
            "vitamin a",
            "retinol",
            "vitamin b",
            "thiamine",
            "riboflavin",
            "niacin",
            "pyridoxine",
            "vitamin b6",
            "vitamin b12",
            "cyanocobalamin",
            "folic acid",
            "folate",
            "vitamin c",
            "ascorbic",
            "vitamin d",
            "cholecalciferol",
            "vitamin e",
            "tocopherol",
            "zinc",
            "iron and folate",
            "calcium",
            "magnesium",
            "multivitamin",
        ],
    },
    {
        "id": "OB_GYN",
        "label": "Obstetrics & Gynecological",
        "description":
            "Drugs used in labour, postpartum haemorrhage, gynecological infections and hormonal support.",
        "category_keywords": [
            "obstetric",
            "obstetrics",
            "gynecologic",
            "gynaecologic",
            "labour",
            "labor",
            "uterotonic",
            "oxytocic",
            "postpartum haemorrhage",
            "pph",
            "tocolytic",
            "infertility",
            "pcos",
        ],
        "generic_keywords": [
            "oxytocin",
            "misoprostol",
            "ergometrine",
            "methylergometrine",
            "carbetocin",
            "clomiphene",
            "clomifene",
            "letrozole",
            "metronidazole",
            "doxycycline",
        ],
    },
    {
        "id": "BPH",
        "label": "Benign Prostate Hyperplasia (BPH)",
        "description":
            "Drugs for BPH: alpha blockers and 5-alpha-reductase inhibitors targeting lower urinary tract symptoms.",
        "category_keywords": [
            "bph",
            "benign prostatic hyperplasia",
            "prostate",
            "lower urinary tract symptoms",
            "luts",
            "uroselective alpha blocker",
        ],
        "generic_keywords": [
            "tamsulosin",
            "alfuzosin",
            "doxazosin",
            "terazosin",
            "silodosin",
            "finasteride",
            "dutasteride",
        ],
    },
    {
        "id": "FLUID_ELECTROLYTE",
        "label": "Fluid & Electrolyte Replacement",
        "description":
            "IV fluids, oral rehydration, electrolytes, dextrose solutions, parenteral nutrition components.",
        "category_keywords": [
            "fluid",
            "electrolyte",
            "iv fluids",
            "intravenous fluids",
            "oral rehydration",
            "ors",
            "parenteral nutrition",
            "crystalloid",
            "colloid",
        ],
        "generic_keywords": [
            "sodium chloride",
            "normal saline",
            "0.9% nacl",
            "ringer lactate",
            "lactated ringer",
            "dextrose",
            "glucose 5%",
            "d5w",
            "d10w",
            "potassium chloride",
            "oral rehydration salts",
            "ors",
            "sodium bicarbonate",
        ],
    },
    {
        "id": "ANTINEOPLASTICS_SUPPORT",
        "label": "Antineoplastics & Supportive",
        "description":
            "Cytotoxic chemotherapy and supportive agents used in oncology.",
        "category_keywords": [
            "antineoplastic",
            "anti-neoplastic",
            "chemotherapy",
            "cytotoxic",
            "oncology",
            "antitumor",
            "anti-tumour",
        ],
        "generic_keywords": [
            "cyclophosphamide",
            "doxorubicin",
            "epirubicin",
            "vincristine",
            "vinblastine",
            "methotrexate",
            "cisplatin",
            "carboplatin",
            "paclitaxel",
            "docetaxel",
            "fluorouracil",
            "5-fu",
            "tamoxifen",
            "letrozole",
            "anastrozole",
            "filgrastim",
            "ondansetron",
            "granisetron",
            "palonosetron",
        ],
    },
    {
        "id": "ENT",
        "label": "Ear, Nose & Throat Preparations",
        "description":
            "Ear drops, nasal sprays, lozenges and other ENT-focused treatments.",
        "category_keywords": [
            "ent",
            "ear nose throat",
            "ear",
            "nose",
            "throat",
            "otic",
            "auricular",
            "nasal spray",
            "nasal drops",
            "nasal",
            "lozenge",
            "gargle",
            "throat spray",
            "decongestant",
        ],
        "generic_keywords": [
            "xylometazoline",
            "oxymetazoline",
            "chloramphenicol ear",
            "ciprofloxacin ear",
            "neomycin ear",
            "nystatin suspension",
            "lidocaine throat",
            "benzocaine lozenge",
            "flurbiprofen lozenge",
            "povidone iodine gargle",
        ],
    },
    {
        "id": "SERA_IG",
        "label": "Sera & Immunoglobulin",
        "description":
            "Immune globulins and antisera for passive immunization (e.g. anti-rabies, anti-tetanus).",
        "category_keywords": [
            "immunoglobulin",
            "immune globulin",
            "ig",
            "antiserum",
            "anti-serum",
            "antitoxin",
            "anti-toxin",
            "anti-rabies serum",
            "anti-tetanus serum",
        ],
        "generic_keywords": [
            "anti-rabies immunoglobulin",
            "rabies immunoglobulin",
            "tetanus immunoglobulin",
            "hepatitis b immunoglobulin",
            "ivig",
            "intravenous immunoglobulin",
        ],
    },
    {
        "id": "ANTIDOTES_POISONING",
        "label": "Antidotes & Used in Poisoning",
        "description":
            "Specific antidotes and agents used for acute poisoning and overdose management.",
        "category_keywords": [
            "antidote",
            "poisoning",
            "toxicity",
            "overdose",
            "toxicology",
            "poison control",
        ],
        "generic_keywords": [
            "naloxone",
            "flumazenil",
            "atropine",
            "pralidoxime",
            "2-pam",
            "n-acetylcysteine",
            "acetylcysteine",
            "activated charcoal",
            "desferrioxamine",
            "deferoxamine",
            "fomepizole",
            "calcium gluconate",
        ],
    },
    {
        "id": "RADIOCONTRAST",
        "label": "Radiocontrast Media",
        "description":
            "Iodinated and other contrast agents used in radiographic and CT imaging.",
        "category_keywords": [
            "contrast",
            "radiocontrast",
            "radiopaque",
            "contrast media",
            "iodinated contrast",
            "ct contrast",
            "x-ray contrast",
        ],
        "generic_keywords": [
            "iohexol",
            "iodixanol",
            "iopamidol",
            "iomeprol",
            "diatrizoate",
            "barium sulfate",
        ],
    },
    {
        "id": "MISC",
        "label": "Miscellaneous (Devices & Others)",
        "description":
            "Medical devices, disposables, diagnostics, and items not clearly classified elsewhere.",
        "category_keywords": [
            "device",
            "medical device",
            "surgical",
            "instrument",
            "disposable",
            "non-drug",
            "miscellaneous",
            "other",
            "diagnostic",
            "equipment",
        ],
        "generic_keywords": [
            "glucometer",
            "stethoscope",
            "sphygmomanometer",
            "bp apparatus",
            "blood pressure monitor",
            "thermometer",
            "pulse oximeter",
            "autoclave",
            "nebulizer",
            "nebuliser",
            "suction machine",
            "suture",
            "catheter",
            "cannula",
        ],
        "device_keywords": [
            "scalpel",
            "scissors",
            "forceps",
            "needle",
            "syringe",
            "catheter",
            "cannula",
            "glove",
            "gloves",
            "mask",
            "face mask",
            "gauze",
            "bandage",
            "plaster",
            "tape",
            "dressing",
            "speculum",
            "set",
            "infusion set",
            "giving set",
            "test strip",
            "strip",
            "lancet",
        ],
    },
]

UMBRELLA_BY_ID: dict[str, dict] = {
    rule["id"]: rule for rule in UMBRELLA_CATEGORY_RULES
}

# Human-readable labels accepted as a medicine category on template rows.
MEDICINE_CATEGORY_LABELS: set[str] = {
    rule["label"] for rule in UMBRELLA_CATEGORY_RULES
}

# ---------------------------------------------------------------------------
# Non-medicine product inference (template v3 rows without a product type)
# ---------------------------------------------------------------------------
CHEMICAL_KEYWORDS: list[str] = [
    "reagent",
    "chemical",
    "buffer",
    "stain",
    "indicator",
    "solvent",
    "acetone",
    "formalin",
    "formaldehyde",
    "ethanol absolute",
    "methanol",
    "xylene",
    "glycerin",
    "hydrogen peroxide",
    "sodium hypochlorite",
    "bleach",
    "disinfectant",
    "distilled water",
    "giemsa",
    "gram stain",
    "immersion oil",
    "kit reagent",
]

ACCESSORY_KEYWORDS: list[str] = [
    "glove",
    "syringe",
    "needle",
    "cannula",
    "catheter",
    "gauze",
    "bandage",
    "plaster",
    "cotton",
    "mask",
    "thermometer",
    "glucometer",
    "test strip",
    "lancet",
    "pregnancy test",
    "test kit",
    "urine bag",
    "infusion set",
    "iv set",
    "blood pressure",
    "bp apparatus",
    "stethoscope",
    "nebulizer machine",
    "pad",
    "diaper",
    "condom",
    "device",
]

ACCESSORIES_LABEL: str = "Accessories"
CHEMICALS_LABEL: str = "Chemicals & Reagents"
