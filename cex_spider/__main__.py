from cex_spider.runner import main

raise SystemExit(main())
