from .pipelines.transform_formulae import main

raise SystemExit(main())
